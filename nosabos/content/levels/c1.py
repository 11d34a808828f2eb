# nosabos/content/levels/c1.py

from nosabos.content.levels.builder import standard_unit

C1_QUIZ = {"questionsRequired": 12, "passingScore": 10}

SKILL_TREE_C1 = [
    standard_unit(
        "unit-c1-1", 0,
        ("Subjunctive Present", "Subjuntivo Presente"),
        ("Complex moods", "Modos complejos"),
        "subjunctive",
        [
            ("Doubt and Desire", "Duda y Deseo", 6825, 55),
            ("Expressing Wishes", "Expresando Deseos", 6860, 50),
            ("Nuanced Meaning", "Significado Matizado", 6895, 45),
            ("Subjunctive Present Quiz", "Prueba de Subjuntivo Presente", 6930, 50),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-2", 1,
        ("Subjunctive Past", "Subjuntivo Pasado"),
        ("Past subjunctive", "Subjuntivo pasado"),
        "subjunctive",
        [
            ("If Only...", "Si Tan Solo...", 7000, 55),
            ("Contrary to Fact", "Contrario a la Realidad", 7035, 60),
            ("Complex Emotions", "Emociones Complejas", 7070, 35),
            ("Subjunctive Past Quiz", "Prueba de Subjuntivo Pasado", 7105, 50),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-3", 2,
        ("Complex Conditionals", "Condicionales Complejos"),
        ("If I had...", "Si hubiera..."),
        "conditional",
        [
            ("Advanced If Clauses", "Cláusulas If Avanzadas", 7175, 45),
            ("Mixed Conditionals", "Condicionales Mixtos", 7210, 60),
            ("Sophisticated Logic", "Lógica Sofisticada", 7245, 45),
            ("Complex Conditionals Quiz", "Prueba de Condicionales Complejos", 7280, 60),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-4", 3,
        ("Idiomatic Expressions", "Expresiones Idiomáticas"),
        ("Idioms and sayings", "Modismos y dichos"),
        "idioms",
        [
            ("Native Phrases", "Frases Nativas", 7350, 45),
            ("Sound Natural", "Sonar Natural", 7385, 60),
            ("Cultural Fluency", "Fluidez Cultural", 7420, 35),
            ("Idiomatic Expressions Quiz", "Prueba de Expresiones Idiomáticas", 7455, 50),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-5", 4,
        ("Academic Writing", "Escritura Académica"),
        ("Formal writing", "Escritura formal"),
        "academic",
        [
            ("Scholarly Language", "Lenguaje Académico", 7525, 35),
            ("Research Papers", "Trabajos de Investigación", 7560, 60),
            ("Critical Analysis", "Análisis Crítico", 7595, 35),
            ("Academic Writing Quiz", "Prueba de Escritura Académica", 7630, 60),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-6", 5,
        ("Professional Communication", "Comunicación Profesional"),
        ("Workplace language", "Lenguaje laboral"),
        "professional",
        [
            ("Business Etiquette", "Etiqueta Empresarial", 7700, 35),
            ("Executive Presence", "Presencia Ejecutiva", 7735, 60),
            ("Leadership Language", "Lenguaje de Liderazgo", 7770, 45),
            ("Professional Communication Quiz", "Prueba de Comunicación Profesional", 7805, 40),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-7", 6,
        ("Debate & Argumentation", "Debate y Argumentación"),
        ("Persuasive skills", "Habilidades persuasivas"),
        "debate",
        [
            ("Persuasive Language", "Lenguaje Persuasivo", 7875, 35),
            ("Building Arguments", "Construyendo Argumentos", 7910, 60),
            ("Winning Debates", "Ganando Debates", 7945, 55),
            ("Debate & Argumentation Quiz", "Prueba de Debate y Argumentación", 7980, 60),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-8", 7,
        ("Cultural Analysis", "Análisis Cultural"),
        ("Deep culture", "Cultura profunda"),
        "culture",
        [
            ("Cultural Studies", "Estudios Culturales", 8050, 45),
            ("Interpreting Culture", "Interpretando Cultura", 8085, 60),
            ("Cross-Cultural Understanding", "Comprensión Intercultural", 8120, 55),
            ("Cultural Analysis Quiz", "Prueba de Análisis Cultural", 8155, 60),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-9", 8,
        ("Literary Techniques", "Técnicas Literarias"),
        ("Literary analysis", "Análisis literario"),
        "literature",
        [
            ("Literary Devices", "Dispositivos Literarios", 8225, 55),
            ("Analyzing Texts", "Analizando Textos", 8260, 60),
            ("Literary Criticism", "Crítica Literaria", 8295, 55),
            ("Literary Techniques Quiz", "Prueba de Técnicas Literarias", 8330, 60),
        ],
        quiz_config=C1_QUIZ,
    ),
    standard_unit(
        "unit-c1-10", 9,
        ("Advanced Discourse", "Discurso Avanzado"),
        ("Complex communication", "Comunicación compleja"),
        "discourse",
        [
            ("Discourse Markers", "Marcadores del Discurso", 8400, 45),
            ("Coherent Arguments", "Argumentos Coherentes", 8435, 40),
            ("Fluent Expression", "Expresión Fluida", 8470, 55),
            ("Advanced Discourse Quiz", "Prueba de Discurso Avanzado", 8505, 50),
        ],
        quiz_config=C1_QUIZ,
    ),
]
