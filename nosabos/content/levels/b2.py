# nosabos/content/levels/b2.py

from nosabos.content.levels.builder import standard_unit

SKILL_TREE_B2 = [
    standard_unit(
        "unit-b2-1", 0,
        ("Past Perfect", "Pluscuamperfecto"),
        ("Had done", "Había hecho"),
        "time expressions",
        [
            ("Before It Happened", "Pluscuamperfecto - Vocabulario", 5025, 55),
            ("Earlier Actions", "Pluscuamperfecto - Práctica", 5055, 40),
            ("Complex Timelines", "Pluscuamperfecto - Aplicación", 5085, 55),
            ("Past Perfect Quiz", "Prueba de Pluscuamperfecto", 5115, 50),
        ],
    ),
    standard_unit(
        "unit-b2-2", 1,
        ("Passive Voice", "Voz Pasiva"),
        ("Is done by", "Es hecho por"),
        "passive",
        [
            ("It Was Done", "Fue Hecho", 5175, 35),
            ("Formal Writing", "Escritura Formal", 5205, 50),
            ("Professional Tone", "Tono Profesional", 5235, 35),
            ("Passive Voice Quiz", "Prueba de Voz Pasiva", 5265, 50),
        ],
    ),
    standard_unit(
        "unit-b2-3", 2,
        ("Reported Speech", "Discurso Indirecto"),
        ("He said that...", "Él dijo que..."),
        "narrative and storytelling",
        [
            ("She Said That...", "Discurso Indirecto - Vocabulario", 5325, 35),
            ("Quoting Others", "Discurso Indirecto - Práctica", 5355, 50),
            ("Retelling Stories", "Discurso Indirecto - Aplicación", 5385, 55),
            ("Reported Speech Quiz", "Prueba de Discurso Indirecto", 5415, 40),
        ],
    ),
    standard_unit(
        "unit-b2-4", 3,
        ("Relative Clauses", "Cláusulas Relativas"),
        ("Who, which, that", "Que, quien"),
        "relative clauses",
        [
            ("Who, Which, That", "Quien, Cual, Que", 5475, 45),
            ("Connecting Ideas", "Conectando Ideas", 5505, 60),
            ("Complex Sentences", "Oraciones Complejas", 5535, 35),
            ("Relative Clauses Quiz", "Prueba de Cláusulas Relativas", 5565, 40),
        ],
    ),
    standard_unit(
        "unit-b2-5", 4,
        ("Formal vs Informal", "Formal e Informal"),
        ("Register switching", "Cambio de registro"),
        "register",
        [
            ("Registers of Speech", "Formal e Informal - Vocabulario", 5625, 45),
            ("Appropriate Language", "Formal e Informal - Práctica", 5655, 50),
            ("Context Matters", "Formal e Informal - Aplicación", 5685, 45),
            ("Formal vs Informal Quiz", "Prueba de Formal e Informal", 5715, 60),
        ],
    ),
    standard_unit(
        "unit-b2-6", 5,
        ("Business Spanish", "Español de Negocios"),
        ("Professional language", "Lenguaje profesional"),
        "professional",
        [
            ("Corporate World", "Mundo Corporativo", 5775, 35),
            ("Professional Meetings", "Reuniones Profesionales", 5805, 50),
            ("Business Communication", "Comunicación Empresarial", 5835, 45),
            ("Business Spanish Quiz", "Prueba de Español de Negocios", 5865, 50),
        ],
    ),
    standard_unit(
        "unit-b2-7", 6,
        ("Science & Innovation", "Ciencia e Innovación"),
        ("Scientific topics", "Temas científicos"),
        "science",
        [
            ("Scientific Terms", "Términos Científicos", 5925, 45),
            ("Technological Advances", "Avances Tecnológicos", 5955, 40),
            ("Future of Science", "Futuro de la Ciencia", 5985, 45),
            ("Science & Innovation Quiz", "Prueba de Ciencia e Innovación", 6015, 40),
        ],
    ),
    standard_unit(
        "unit-b2-8", 7,
        ("Social Issues", "Problemas Sociales"),
        ("Society and issues", "Sociedad y problemas"),
        "social justice",
        [
            ("Society Today", "Problemas Sociales - Vocabulario", 6075, 35),
            ("Discussing Problems", "Problemas Sociales - Práctica", 6105, 50),
            ("Making Change", "Problemas Sociales - Aplicación", 6135, 45),
            ("Social Issues Quiz", "Prueba de Problemas Sociales", 6165, 50),
        ],
    ),
    standard_unit(
        "unit-b2-9", 8,
        ("Arts & Literature", "Artes y Literatura"),
        ("Cultural works", "Obras culturales"),
        "literature",
        [
            ("Creative Expression", "Expresión Creativa", 6225, 45),
            ("Artistic Movements", "Movimientos Artísticos", 6255, 40),
            ("Cultural Analysis", "Análisis Cultural", 6285, 45),
            ("Arts & Literature Quiz", "Prueba de Artes y Literatura", 6315, 60),
        ],
    ),
    standard_unit(
        "unit-b2-10", 9,
        ("Politics & Society", "Política y Sociedad"),
        ("Civic topics", "Temas cívicos"),
        "politics",
        [
            ("Civic Engagement", "Participación Cívica", 6375, 55),
            ("Political Discourse", "Discurso Político", 6405, 50),
            ("Active Citizenship", "Ciudadanía Activa", 6435, 35),
            ("Politics & Society Quiz", "Prueba de Política y Sociedad", 6465, 60),
        ],
    ),
    standard_unit(
        "unit-b2-11", 10,
        ("Health & Lifestyle", "Salud y Estilo de Vida"),
        ("Wellness", "Bienestar"),
        "wellness",
        [
            ("Wellness Choices", "Elecciones de Bienestar", 6525, 35),
            ("Balanced Living", "Vida Equilibrada", 6555, 50),
            ("Holistic Health", "Salud Holística", 6585, 55),
            ("Health & Lifestyle Quiz", "Prueba de Salud y Estilo de Vida", 6615, 40),
        ],
    ),
    standard_unit(
        "unit-b2-12", 11,
        ("Abstract Concepts", "Conceptos Abstractos"),
        ("Complex ideas", "Ideas complejas"),
        "abstract",
        [
            ("Philosophical Ideas", "Ideas Filosóficas", 6675, 35),
            ("Deep Thinking", "Pensamiento Profundo", 6705, 60),
            ("Theoretical Discussion", "Discusión Teórica", 6735, 45),
            ("Abstract Concepts Quiz", "Prueba de Conceptos Abstractos", 6765, 40),
        ],
    ),
]
