# nosabos/content/levels/c2.py

from nosabos.content.levels.builder import standard_unit

C2_QUIZ = {"questionsRequired": 12, "passingScore": 10}

SKILL_TREE_C2 = [
    standard_unit(
        "unit-c2-1", 0,
        ("Native Idioms", "Modismos Nativos"),
        ("Advanced idioms", "Modismos avanzados"),
        "idioms and colloquial expressions",
        [
            ("Advanced Expressions", "Expresiones Avanzadas", 8575, 55),
            ("Speaking Like a Native", "Hablando Como Nativo", 8615, 40),
            ("Cultural Mastery", "Maestría Cultural", 8655, 45),
            ("Native Idioms Quiz", "Prueba de Modismos Nativos", 8695, 50),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-2", 1,
        ("Regional Variations", "Variaciones Regionales"),
        ("Dialects", "Dialectos"),
        "regional language",
        [
            ("Dialects", "Dialectos", 8775, 55),
            ("Accent and Usage", "Acento y Uso", 8815, 50),
            ("Linguistic Diversity", "Diversidad Lingüística", 8855, 55),
            ("Regional Variations Quiz", "Prueba de Variaciones Regionales", 8895, 40),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-3", 2,
        ("Stylistic Mastery", "Dominio Estilístico"),
        ("Style control", "Control de estilo"),
        "style",
        [
            ("Refined Language", "Dominio Estilístico - Vocabulario", 8975, 55),
            ("Elegant Expression", "Dominio Estilístico - Práctica", 9015, 50),
            ("Artistic Language", "Dominio Estilístico - Aplicación", 9055, 45),
            ("Stylistic Mastery Quiz", "Prueba de Dominio Estilístico", 9095, 40),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-4", 3,
        ("Rhetorical Devices", "Dispositivos Retóricos"),
        ("Persuasive techniques", "Técnicas persuasivas"),
        "rhetoric",
        [
            ("Persuasive Techniques", "Técnicas Persuasivas", 9175, 35),
            ("Powerful Speech", "Discurso Poderoso", 9215, 50),
            ("Master Rhetoric", "Maestría Retórica", 9255, 45),
            ("Rhetorical Devices Quiz", "Prueba de Dispositivos Retóricos", 9295, 40),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-5", 4,
        ("Specialized Vocabulary", "Vocabulario Especializado"),
        ("Technical terms", "Términos técnicos"),
        "specialized",
        [
            ("Expert Terminology", "Terminología Experta", 9375, 45),
            ("Professional Fields", "Campos Profesionales", 9415, 60),
            ("Domain Expertise", "Experiencia en el Dominio", 9455, 55),
            ("Specialized Vocabulary Quiz", "Prueba de Vocabulario Especializado", 9495, 60),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-6", 5,
        ("Subtle Nuances", "Matices Sutiles"),
        ("Fine distinctions", "Distinciones finas"),
        "advanced vocabulary and nuanced expressions",
        [
            ("Fine Distinctions", "Distinciones Finas", 9575, 35),
            ("Precise Meaning", "Significado Preciso", 9615, 50),
            ("Mastery of Detail", "Maestría del Detalle", 9655, 55),
            ("Subtle Nuances Quiz", "Prueba de Matices Sutiles", 9695, 40),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-7", 6,
        ("Cultural Expertise", "Experiencia Cultural"),
        ("Cultural mastery", "Dominio cultural"),
        "culture",
        [
            ("Cultural Intelligence", "Inteligencia Cultural", 9775, 35),
            ("Cultural Navigator", "Navegador Cultural", 9815, 50),
            ("Cultural Ambassador", "Embajador Cultural", 9855, 35),
            ("Cultural Expertise Quiz", "Prueba de Experiencia Cultural", 9895, 50),
        ],
        quiz_config=C2_QUIZ,
    ),
    standard_unit(
        "unit-c2-8", 7,
        ("Near-Native Fluency", "Fluidez Casi Nativa"),
        ("Native-like skills", "Habilidades casi nativas"),
        "fluency",
        [
            ("Native-Like Skills", "Habilidades Nativas", 9975, 35),
            ("Perfect Fluency", "Fluidez Perfecta", 10015, 40),
            ("Complete Mastery", "Maestría Completa", 10055, 35),
            ("Near-Native Fluency Quiz", "Prueba de Fluidez Casi Nativa", 10095, 50),
        ],
        quiz_config=C2_QUIZ,
    ),
]
