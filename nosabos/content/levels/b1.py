# nosabos/content/levels/b1.py

from nosabos.content.levels.builder import standard_unit

SKILL_TREE_B1 = [
    standard_unit(
        "unit-b1-1", 0,
        ("Present Perfect", "Pretérito Perfecto"),
        ("Have done", "He hecho"),
        "time expressions",
        [
            ("Have You Ever?", "Pretérito Perfecto - Vocabulario", 3150, 35),
            ("Life Experiences", "Pretérito Perfecto - Práctica", 3175, 50),
            ("Achievements", "Pretérito Perfecto - Aplicación", 3200, 55),
            ("Present Perfect Quiz", "Prueba de Pretérito Perfecto", 3225, 60),
        ],
    ),
    standard_unit(
        "unit-b1-2", 1,
        ("Past Continuous", "Pasado Continuo"),
        ("Was doing", "Estaba haciendo"),
        "time expressions",
        [
            ("While It Was Happening", "Mientras Sucedía", 3275, 45),
            ("Background Actions", "Acciones de Fondo", 3300, 50),
            ("Setting the Scene", "Ambientando la Escena", 3325, 55),
            ("Past Continuous Quiz", "Prueba de Pasado Continuo", 3350, 60),
        ],
    ),
    standard_unit(
        "unit-b1-3", 2,
        ("Future Tense", "Futuro"),
        ("Will do", "Haré"),
        "time expressions",
        [
            ("Tomorrow's World", "Futuro - Vocabulario", 3400, 35),
            ("Predictions", "Futuro - Práctica", 3425, 60),
            ("Future Possibilities", "Futuro - Aplicación", 3450, 55),
            ("Future Tense Quiz", "Prueba de Futuro", 3475, 40),
        ],
    ),
    standard_unit(
        "unit-b1-4", 3,
        ("Comparisons", "Comparaciones"),
        ("More, less, equal", "Más, menos, igual"),
        "comparisons",
        [
            ("Better or Worse", "Mejor o Peor", 3525, 35),
            ("Making Comparisons", "Haciendo Comparaciones", 3550, 50),
            ("Superlatives", "Superlativos", 3575, 55),
            ("Comparisons Quiz", "Prueba de Comparaciones", 3600, 50),
        ],
    ),
    standard_unit(
        "unit-b1-5", 4,
        ("Giving Advice", "Dar Consejos"),
        ("Should, must", "Debería, debe"),
        "advice and suggestions",
        [
            ("Should and Shouldn't", "Deberías y No Deberías", 3650, 45),
            ("Helpful Suggestions", "Sugerencias Útiles", 3675, 40),
            ("Problem Solving", "Resolviendo Problemas", 3700, 45),
            ("Giving Advice Quiz", "Prueba de Dar Consejos", 3725, 50),
        ],
    ),
    standard_unit(
        "unit-b1-6", 5,
        ("Making Suggestions", "Hacer Sugerencias"),
        ("Let's, why don't we", "Vamos, por qué no"),
        "advice and suggestions",
        [
            ("Why Don't We?", "¿Por Qué No?", 3775, 45),
            ("Let's Try This", "Intentemos Esto", 3800, 50),
            ("Collaborative Ideas", "Ideas Colaborativas", 3825, 35),
            ("Making Suggestions Quiz", "Prueba de Hacer Sugerencias", 3850, 60),
        ],
    ),
    standard_unit(
        "unit-b1-7", 6,
        ("Conditional Would", "Condicional"),
        ("I would...", "Yo haría..."),
        "conditional",
        [
            ("If I Were You", "Condicional - Vocabulario", 3900, 45),
            ("Hypothetical Situations", "Condicional - Práctica", 3925, 40),
            ("Imagining Possibilities", "Condicional - Aplicación", 3950, 35),
            ("Conditional Would Quiz", "Prueba de Condicional", 3975, 40),
        ],
    ),
    standard_unit(
        "unit-b1-8", 7,
        ("Travel & Tourism", "Viajes y Turismo"),
        ("Traveling abroad", "Viajar al extranjero"),
        "travel",
        [
            ("Trip Planning", "Planeando Viajes", 4025, 35),
            ("Booking a Trip", "Reservando un Viaje", 4050, 40),
            ("Adventure Awaits", "La Aventura Espera", 4075, 35),
            ("Travel & Tourism Quiz", "Prueba de Viajes y Turismo", 4100, 50),
        ],
    ),
    standard_unit(
        "unit-b1-9", 8,
        ("Environment", "Medio Ambiente"),
        ("Nature and ecology", "Naturaleza y ecología"),
        "environment",
        [
            ("Our Planet", "Nuestro Planeta", 4150, 35),
            ("Going Green", "Siendo Ecológico", 4175, 50),
            ("Saving Earth", "Salvando la Tierra", 4200, 55),
            ("Environment Quiz", "Prueba de Medio Ambiente", 4225, 60),
        ],
    ),
    standard_unit(
        "unit-b1-10", 9,
        ("Culture & Traditions", "Cultura y Tradiciones"),
        ("Cultural practices", "Prácticas culturales"),
        "culture",
        [
            ("Cultural Heritage", "Patrimonio Cultural", 4275, 45),
            ("Customs and Festivals", "Costumbres y Festivales", 4300, 50),
            ("Celebrating Diversity", "Celebrando la Diversidad", 4325, 45),
            ("Culture & Traditions Quiz", "Prueba de Cultura y Tradiciones", 4350, 60),
        ],
    ),
    standard_unit(
        "unit-b1-11", 10,
        ("Media & News", "Medios y Noticias"),
        ("News and media", "Noticias y medios"),
        "current events",
        [
            ("Headlines", "Titulares", 4400, 45),
            ("Current Events", "Eventos Actuales", 4425, 60),
            ("Informed Citizen", "Ciudadano Informado", 4450, 45),
            ("Media & News Quiz", "Prueba de Medios y Noticias", 4475, 40),
        ],
    ),
    standard_unit(
        "unit-b1-12", 11,
        ("Expressing Opinions", "Expresar Opiniones"),
        ("I think that...", "Creo que..."),
        "opinions and debate",
        [
            ("I Think That...", "Creo Que...", 4525, 55),
            ("Sharing Views", "Compartiendo Puntos de Vista", 4550, 40),
            ("Respectful Debate", "Debate Respetuoso", 4575, 35),
            ("Expressing Opinions Quiz", "Prueba de Expresar Opiniones", 4600, 40),
        ],
    ),
    standard_unit(
        "unit-b1-13", 12,
        ("Making Complaints", "Quejas"),
        ("Express dissatisfaction", "Expresar insatisfacción"),
        "complaints",
        [
            ("Something's Wrong", "Quejas - Vocabulario", 4650, 55),
            ("I'm Not Satisfied", "Quejas - Práctica", 4675, 40),
            ("Resolving Issues", "Quejas - Aplicación", 4700, 35),
            ("Making Complaints Quiz", "Prueba de Quejas", 4725, 50),
        ],
    ),
    standard_unit(
        "unit-b1-14", 13,
        ("Experiences", "Experiencias"),
        ("Life experiences", "Experiencias de vida"),
        "experiences",
        [
            ("Memorable Moments", "Momentos Memorables", 4775, 55),
            ("Sharing Experiences", "Compartiendo Experiencias", 4800, 60),
            ("Learning from Life", "Aprendiendo de la Vida", 4825, 45),
            ("Experiences Quiz", "Prueba de Experiencias", 4850, 50),
        ],
    ),
    standard_unit(
        "unit-b1-15", 14,
        ("Probability", "Probabilidad"),
        ("Maybe, might", "Quizás, podría"),
        "probability",
        [
            ("Maybe and Perhaps", "Quizás y Tal Vez", 4900, 55),
            ("Likely or Unlikely", "Probable o Improbable", 4925, 50),
            ("Making Predictions", "Haciendo Predicciones", 4950, 55),
            ("Probability Quiz", "Prueba de Probabilidad", 4975, 40),
        ],
    ),
]
