# nosabos/content/levels/a1.py - Tutorial, Pre-A1 foundations and A1 units

from nosabos.content.levels.builder import standard_unit

TUTORIAL_UNIT = {
    "id": "unit-tutorial-a1",
    "title": {"en": "Getting Started", "es": "Primeros Pasos"},
    "description": {
        "en": "Learn how to use the app and explore all features",
        "es": "Aprende a usar la app y explora todas las funciones",
    },
    "color": "#6366F1",
    "position": {"row": -2, "offset": 0},
    "isTutorial": True,
    "lessons": [
        {
            "id": "lesson-tutorial-1",
            "title": {"en": "Getting Started", "es": "Primeros Pasos"},
            "description": {
                "en": "A guided tour of all learning modules",
                "es": "Un recorrido guiado por todos los módulos de aprendizaje",
            },
            "xpRequired": 0,
            "xpReward": 50,
            "isTutorial": True,
            "modes": ["vocabulary", "grammar", "reading", "stories", "realtime"],
            "content": {
                "vocabulary": {
                    "topic": "tutorial",
                    "focusPoints": ["basic words", "greetings"],
                    "tutorialDescription": {
                        "en": "Learn new words through interactive questions.",
                        "es": "Aprende nuevas palabras mediante preguntas interactivas.",
                    },
                },
                "grammar": {
                    "topic": "tutorial",
                    "focusPoints": ["basic patterns"],
                    "tutorialDescription": {
                        "en": "Master grammar rules through exercises.",
                        "es": "Domina las reglas gramaticales mediante ejercicios.",
                    },
                },
                "reading": {
                    "topic": "tutorial",
                    "prompt": "Introduction to reading comprehension",
                    "tutorialDescription": {
                        "en": "Improve your reading skills by following along with passages.",
                        "es": "Mejora tus habilidades de lectura siguiendo los textos.",
                    },
                },
                "stories": {
                    "topic": "tutorial",
                    "prompt": "Introduction to interactive stories",
                    "tutorialDescription": {
                        "en": "Practice with interactive stories and roleplay by reading and speaking sentence by sentence.",
                        "es": "Practica con historias interactivas y juegos de rol leyendo y hablando oración por oración.",
                    },
                },
                "realtime": {
                    "scenario": "Say hello",
                    "prompt": "Practice saying hello in a live chat",
                    "tutorialDescription": {
                        "en": "Practice speaking with realtime conversations and goal oriented chats.",
                        "es": "Practica la expresión oral con conversaciones en tiempo real y chats orientados a objetivos.",
                    },
                },
            },
        },
    ],
}

PRE_A1_UNIT = {
    "id": "unit-pre-a1-1",
    "title": {"en": "Pre-A1 Foundations", "es": "Fundamentos Pre-A1"},
    "description": {
        "en": "100 must-know words and phrases to start fast",
        "es": "100 palabras y frases imprescindibles para empezar rápido",
    },
    "color": "#10B981",
    "position": {"row": -1, "offset": 0},
    "lessons": [
        {
            "id": "lesson-pre-a1-1",
            "title": {"en": "Everyday Starters", "es": "Arranques Cotidianos"},
            "description": {
                "en": "Your first 20 high-frequency words for greetings and basics",
                "es": "Tus primeras 20 palabras de alta frecuencia para saludos y básicos",
            },
            "xpRequired": 0,
            "xpReward": 25,
            "modes": ["vocabulary", "listening"],
            "content": {
                "vocabulary": {
                    "topic": "greetings and starters",
                    "focusPoints": ["hello/bye variations", "thanks/please", "yes/no"],
                },
                "listening": {
                    "topic": "greetings and starters",
                    "focusPoints": ["recognizing common polite phrases", "intonation for greetings"],
                },
            },
        },
        {
            "id": "lesson-pre-a1-2",
            "title": {"en": "People & Places", "es": "Personas y Lugares"},
            "description": {
                "en": "Add 20 words for names, family, and moving around",
                "es": "Suma 20 palabras para nombres, familia y moverte por ahí",
            },
            "xpRequired": 15,
            "xpReward": 25,
            "modes": ["vocabulary", "grammar"],
            "content": {
                "vocabulary": {
                    "topic": "people and places",
                    "focusPoints": ["family", "locations", "getting attention"],
                },
                "grammar": {"topic": "formula chunks", "focusPoints": ["I am/from", "This is", "Where is?"]},
            },
        },
        {
            "id": "lesson-pre-a1-3",
            "title": {"en": "Actions & Essentials", "es": "Acciones y Esenciales"},
            "description": {
                "en": "20 everyday verbs and short requests to get things done",
                "es": "20 verbos cotidianos y peticiones cortas para lograr cosas",
            },
            "xpRequired": 40,
            "xpReward": 30,
            "modes": ["vocabulary", "stories"],
            "content": {
                "vocabulary": {
                    "topic": "actions and needs",
                    "focusPoints": ["common verbs", "requests", "need/want"],
                },
                "realtime": {
                    "scenario": "quick requests",
                    "prompt": "Roleplay asking for help, ordering, or finding something",
                },
            },
        },
        {
            "id": "lesson-pre-a1-4",
            "title": {"en": "Time, Travel & Directions", "es": "Tiempo, Viajes y Direcciones"},
            "description": {
                "en": "20 words for time, transport, and finding your way",
                "es": "20 palabras para tiempo, transporte y orientarte",
            },
            "xpRequired": 65,
            "xpReward": 30,
            "modes": ["vocabulary", "reading"],
            "content": {
                "vocabulary": {
                    "topic": "time and movement",
                    "focusPoints": ["days and hours", "here/there", "left/right"],
                },
                "reading": {
                    "topic": "travel mini-notices",
                    "prompt": "Read tiny signs and captions about time and direction",
                },
            },
        },
        {
            "id": "lesson-pre-a1-5",
            "title": {"en": "Social Glue & Questions", "es": "Conectores Sociales y Preguntas"},
            "description": {
                "en": "Round out 100 words with connectors, feelings, and quick questions",
                "es": "Completa 100 palabras con conectores, emociones y preguntas rápidas",
            },
            "xpRequired": 90,
            "xpReward": 35,
            "modes": ["vocabulary", "stories"],
            "content": {
                "vocabulary": {
                    "topic": "connectors and questions",
                    "focusPoints": ["and/but/because", "how/what/where", "feeling words"],
                },
                "stories": {
                    "topic": "micro roleplays",
                    "prompt": "Act out short meetups using your new question words",
                },
            },
        },
    ],
}

SKILL_TREE_A1 = [
    TUTORIAL_UNIT,
    PRE_A1_UNIT,
    standard_unit(
        "unit-a1-1", 0,
        ("First Words", "Primeras Palabras"),
        ("Your very first words", "Tus primeras palabras"),
        "greetings",
        [
            ("Hello and Goodbye", "Hola y Adiós", 110, 45),
            ("Meeting Someone New", "Conocer a Alguien Nuevo", 125, 40),
            ("Polite Conversations", "Conversaciones Corteses", 140, 55),
            ("First Words Quiz", "Prueba de Primeras Palabras", 155, 40),
        ],
        lesson_descriptions=[
            ("Learn essential greetings and farewells", "Aprende saludos y despedidas esenciales"),
            ("Practice greetings in real conversations", "Practica saludos en conversaciones reales"),
            ("Master greeting etiquette and social niceties", "Domina la etiqueta de saludos y cortesías sociales"),
        ],
    ),
    standard_unit(
        "unit-a1-2", 1,
        ("Introducing Yourself", "Presentándote"),
        ("Say your name and origin", "Di tu nombre y origen"),
        "introductions",
        [
            ("What's Your Name?", "¿Cómo Te Llamas?", 185, 45),
            ("Nice to Meet You", "Mucho Gusto", 200, 50),
            ("Tell Me About Yourself", "Cuéntame Sobre Ti", 215, 45),
            ("Introducing Yourself Quiz", "Prueba de Presentándote", 230, 60),
        ],
        lesson_descriptions=[
            ("Learn to introduce yourself and ask others' names", "Aprende a presentarte y preguntar nombres"),
            ("Practice introductions in real conversations", "Practica presentaciones en conversaciones reales"),
            ("Share personal information and ask about others", "Comparte información personal y pregunta sobre otros"),
        ],
    ),
    standard_unit(
        "unit-a1-3", 2,
        ("Numbers 0-20", "Números 0-20"),
        ("Count to twenty", "Cuenta hasta veinte"),
        "numbers",
        [
            ("Counting to Twenty", "Contando hasta Veinte", 260, 45),
            ("Using Numbers Daily", "Usando Números Diariamente", 275, 60),
            ("Phone Numbers and Ages", "Números de Teléfono y Edades", 290, 45),
            ("Numbers 0-20 Quiz", "Prueba de Números 0-20", 305, 50),
        ],
        lesson_descriptions=[
            ("Learn to count from zero to twenty", "Aprende a contar desde cero hasta veinte"),
            ("Practice numbers in everyday situations", "Practica números en situaciones cotidianas"),
            ("Apply numbers to phone numbers and ages", "Aplica números a teléfonos y edades"),
        ],
    ),
    standard_unit(
        "unit-a1-4", 3,
        ("Numbers 21-100", "Números 21-100"),
        ("Larger numbers", "Números más grandes"),
        "numbers",
        [
            ("Counting to One Hundred", "Contando hasta Cien", 335, 55),
            ("Prices and Money", "Precios y Dinero", 350, 50),
            ("Big Numbers in Context", "Números Grandes en Contexto", 365, 35),
            ("Numbers 21-100 Quiz", "Prueba de Números 21-100", 380, 50),
        ],
        lesson_descriptions=[
            ("Learn to count from twenty-one to one hundred", "Aprende a contar desde veintiuno hasta cien"),
            ("Practice using larger numbers with prices and money", "Practica usando números grandes con precios y dinero"),
            ("Apply larger numbers in real-life contexts", "Aplica números grandes en contextos de la vida real"),
        ],
    ),
    standard_unit(
        "unit-a1-5", 4,
        ("Days of Week", "Días de la Semana"),
        ("Learn the days", "Aprende los días"),
        "days of week",
        [
            ("Monday to Sunday", "Lunes a Domingo", 410, 35),
            ("What Day Is It?", "¿Qué Día Es?", 425, 40),
            ("Planning Your Week", "Planificando Tu Semana", 440, 35),
            ("Days of Week Quiz", "Prueba de Días de la Semana", 455, 40),
        ],
    ),
    standard_unit(
        "unit-a1-6", 5,
        ("Months & Dates", "Meses y Fechas"),
        ("Calendar basics", "Conceptos del calendario"),
        "time expressions",
        [
            ("Twelve Months", "Doce Meses", 485, 35),
            ("When's Your Birthday?", "¿Cuándo Es Tu Cumpleaños?", 500, 40),
            ("Important Dates", "Fechas Importantes", 515, 45),
            ("Months & Dates Quiz", "Prueba de Meses y Fechas", 530, 60),
        ],
    ),
    standard_unit(
        "unit-a1-7", 6,
        ("Telling Time", "Decir la Hora"),
        ("What time is it?", "¿Qué hora es?"),
        "time",
        [
            ("What Time Is It?", "¿Qué Hora Es?", 560, 55),
            ("Daily Schedule", "Horario Diario", 575, 50),
            ("Making Appointments", "Haciendo Citas", 590, 55),
            ("Telling Time Quiz", "Prueba de Decir la Hora", 605, 60),
        ],
    ),
    standard_unit(
        "unit-a1-8", 7,
        ("Family Members", "Familia"),
        ("Your family", "Tu familia"),
        "family",
        [
            ("My Family Tree", "Mi Árbol Genealógico", 635, 35),
            ("Talking About Family", "Hablando de la Familia", 650, 40),
            ("Family Relationships", "Relaciones Familiares", 665, 35),
            ("Family Members Quiz", "Prueba de Familia", 680, 50),
        ],
    ),
    standard_unit(
        "unit-a1-9", 8,
        ("Colors & Shapes", "Colores y Formas"),
        ("Describe visually", "Describe visualmente"),
        "colors",
        [
            ("Rainbow Colors", "Colores del Arcoíris", 710, 45),
            ("Describing Things", "Describiendo Cosas", 725, 50),
            ("Colors Everywhere", "Colores por Todas Partes", 740, 45),
            ("Colors & Shapes Quiz", "Prueba de Colores y Formas", 755, 40),
        ],
    ),
    standard_unit(
        "unit-a1-10", 9,
        ("Food & Drinks", "Comida y Bebidas"),
        ("Basic food vocabulary", "Vocabulario de comida"),
        "food and drinks",
        [
            ("Food Vocabulary", "Vocabulario de Comida", 785, 45),
            ("I'm Hungry!", "¡Tengo Hambre!", 800, 60),
            ("My Favorite Foods", "Mis Comidas Favoritas", 815, 55),
            ("Food & Drinks Quiz", "Prueba de Comida y Bebidas", 830, 40),
        ],
    ),
    standard_unit(
        "unit-a1-11", 10,
        ("At the Restaurant", "En el Restaurante"),
        ("Order food", "Pide comida"),
        "food and drinks",
        [
            ("Restaurant Words", "Palabras de Restaurante", 860, 45),
            ("Ordering a Meal", "Pidiendo una Comida", 875, 60),
            ("Paying the Bill", "Pagando la Cuenta", 890, 35),
            ("At the Restaurant Quiz", "Prueba de En el Restaurante", 905, 50),
        ],
    ),
    standard_unit(
        "unit-a1-12", 11,
        ("Common Objects", "Objetos Comunes"),
        ("Everyday items", "Artículos cotidianos"),
        "common objects",
        [
            ("Everyday Items", "Objetos Cotidianos", 935, 45),
            ("What Is This?", "¿Qué Es Esto?", 950, 50),
            ("Objects Around Us", "Objetos a Nuestro Alrededor", 965, 45),
            ("Common Objects Quiz", "Prueba de Objetos Comunes", 980, 60),
        ],
    ),
    standard_unit(
        "unit-a1-13", 12,
        ("In the House", "En la Casa"),
        ("Rooms and furniture", "Habitaciones y muebles"),
        "house and rooms",
        [
            ("Rooms of the House", "Cuartos de la Casa", 1010, 45),
            ("Where Is It?", "¿Dónde Está?", 1025, 40),
            ("At Home", "En Casa", 1040, 55),
            ("In the House Quiz", "Prueba de En la Casa", 1055, 40),
        ],
    ),
    standard_unit(
        "unit-a1-14", 13,
        ("Clothing", "Ropa"),
        ("What you wear", "Lo que vistes"),
        "clothing",
        [
            ("What to Wear", "Qué Ponerse", 1085, 35),
            ("Shopping for Clothes", "Comprando Ropa", 1100, 50),
            ("My Wardrobe", "Mi Guardarropa", 1115, 35),
            ("Clothing Quiz", "Prueba de Ropa", 1130, 40),
        ],
    ),
    standard_unit(
        "unit-a1-15", 14,
        ("Daily Routine", "Rutina Diaria"),
        ("Your day", "Tu día"),
        "daily activities",
        [
            ("My Day", "Mi Día", 1160, 35),
            ("Daily Activities", "Actividades Diarias", 1175, 50),
            ("From Morning to Night", "De la Mañana a la Noche", 1190, 45),
            ("Daily Routine Quiz", "Prueba de Rutina Diaria", 1205, 40),
        ],
    ),
    standard_unit(
        "unit-a1-16", 15,
        ("Weather", "Clima"),
        ("Talk about weather", "Habla del clima"),
        "weather",
        [
            ("How's the Weather?", "¿Cómo Está el Clima?", 1235, 45),
            ("Four Seasons", "Cuatro Estaciones", 1250, 50),
            ("Weather Reports", "Reportes del Clima", 1265, 55),
            ("Weather Quiz", "Prueba de Clima", 1280, 40),
        ],
    ),
    standard_unit(
        "unit-a1-17", 16,
        ("Likes & Dislikes", "Gustos"),
        ("Preferences", "Preferencias"),
        "preferences",
        [
            ("I Like, I Love", "Me Gusta, Me Encanta", 1310, 55),
            ("Expressing Preferences", "Expresando Preferencias", 1325, 40),
            ("Favorites and Dislikes", "Favoritos y Disgustos", 1340, 55),
            ("Likes & Dislikes Quiz", "Prueba de Gustos", 1355, 50),
        ],
    ),
    standard_unit(
        "unit-a1-18", 17,
        ("Basic Questions", "Preguntas"),
        ("Ask questions", "Haz preguntas"),
        "question words",
        [
            ("Question Words", "Palabras de Pregunta", 1385, 35),
            ("Asking Questions", "Haciendo Preguntas", 1400, 40),
            ("Getting Information", "Obteniendo Información", 1415, 55),
            ("Basic Questions Quiz", "Prueba de Preguntas", 1430, 50),
        ],
    ),
]
