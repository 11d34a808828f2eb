# nosabos/content/levels/a2.py

from nosabos.content.levels.builder import standard_unit

SKILL_TREE_A2 = [
    standard_unit(
        "unit-a2-1", 0,
        ("Describing People", "Describir Personas"),
        ("Physical descriptions", "Descripciones físicas"),
        "physical descriptions",
        [
            ("Appearance Words", "Palabras de Apariencia", 1350, 45),
            ("How Do They Look?", "¿Cómo Se Ven?", 1370, 40),
            ("Detailed Descriptions", "Descripciones Detalladas", 1390, 45),
            ("Describing People Quiz", "Prueba de Describir Personas", 1410, 50),
        ],
    ),
    standard_unit(
        "unit-a2-2", 1,
        ("Describing Places", "Describir Lugares"),
        ("Talk about locations", "Habla sobre lugares"),
        "places",
        [
            ("Places Around Town", "Lugares en la Ciudad", 1450, 55),
            ("My Neighborhood", "Mi Vecindario", 1470, 40),
            ("Dream Destinations", "Destinos Soñados", 1490, 45),
            ("Describing Places Quiz", "Prueba de Describir Lugares", 1510, 40),
        ],
    ),
    standard_unit(
        "unit-a2-3", 2,
        ("Shopping & Money", "Compras y Dinero"),
        ("Buy things", "Compra cosas"),
        "shopping",
        [
            ("At the Store", "En la Tienda", 1550, 45),
            ("Bargain Hunting", "Buscando Ofertas", 1570, 60),
            ("Smart Shopping", "Comprando Inteligentemente", 1590, 45),
            ("Shopping & Money Quiz", "Prueba de Compras y Dinero", 1610, 40),
        ],
    ),
    standard_unit(
        "unit-a2-4", 3,
        ("At the Market", "En el Mercado"),
        ("Fresh food shopping", "Compra de alimentos"),
        "shopping",
        [
            ("Fresh Produce", "Productos Frescos", 1650, 55),
            ("Buying Groceries", "Comprando Comestibles", 1670, 40),
            ("Market Day", "Día de Mercado", 1690, 55),
            ("At the Market Quiz", "Prueba de En el Mercado", 1710, 60),
        ],
    ),
    standard_unit(
        "unit-a2-5", 4,
        ("Transportation", "Transporte"),
        ("Getting around", "Moverse"),
        "transportation",
        [
            ("Getting Around", "Moviéndose", 1750, 35),
            ("Taking the Bus", "Tomando el Autobús", 1770, 40),
            ("Travel Options", "Opciones de Viaje", 1790, 45),
            ("Transportation Quiz", "Prueba de Transporte", 1810, 40),
        ],
    ),
    standard_unit(
        "unit-a2-6", 5,
        ("Directions", "Direcciones"),
        ("Find your way", "Encuentra tu camino"),
        "directions",
        [
            ("Left and Right", "Izquierda y Derecha", 1850, 35),
            ("How Do I Get There?", "¿Cómo Llego Ahí?", 1870, 50),
            ("Finding Your Way", "Encontrando Tu Camino", 1890, 55),
            ("Directions Quiz", "Prueba de Direcciones", 1910, 50),
        ],
    ),
    standard_unit(
        "unit-a2-7", 6,
        ("Making Plans", "Hacer Planes"),
        ("Social arrangements", "Arreglos sociales"),
        "invitations",
        [
            ("Future Activities", "Actividades Futuras", 1950, 45),
            ("Let's Meet Up!", "¡Vamos a Reunirnos!", 1970, 60),
            ("Scheduling Events", "Programando Eventos", 1990, 35),
            ("Making Plans Quiz", "Prueba de Hacer Planes", 2010, 40),
        ],
    ),
    standard_unit(
        "unit-a2-8", 7,
        ("Hobbies & Interests", "Pasatiempos"),
        ("Free time", "Tiempo libre"),
        "arts and reading",
        [
            ("Free Time Fun", "Pasatiempos - Vocabulario", 2050, 45),
            ("What Do You Enjoy?", "Pasatiempos - Práctica", 2070, 40),
            ("Sharing Interests", "Pasatiempos - Aplicación", 2090, 45),
            ("Hobbies & Interests Quiz", "Prueba de Pasatiempos", 2110, 50),
        ],
    ),
    standard_unit(
        "unit-a2-9", 8,
        ("Sports & Exercise", "Deportes"),
        ("Athletic activities", "Actividades atléticas"),
        "sports",
        [
            ("Playing Sports", "Deportes - Vocabulario", 2150, 55),
            ("Staying Active", "Deportes - Práctica", 2170, 40),
            ("Fitness Goals", "Deportes - Aplicación", 2190, 55),
            ("Sports & Exercise Quiz", "Prueba de Deportes", 2210, 60),
        ],
    ),
    standard_unit(
        "unit-a2-10", 9,
        ("Past Tense Regular", "Pasado Regular"),
        ("Regular past verbs", "Verbos pasados regulares"),
        "time expressions",
        [
            ("Yesterday's Actions", "Acciones de Ayer", 2250, 35),
            ("What Did You Do?", "¿Qué Hiciste?", 2270, 60),
            ("Recent Events", "Eventos Recientes", 2290, 45),
            ("Past Tense Regular Quiz", "Prueba de Pasado Regular", 2310, 40),
        ],
    ),
    standard_unit(
        "unit-a2-11", 10,
        ("Past Tense Irregular", "Pasado Irregular"),
        ("Irregular verbs", "Verbos irregulares"),
        "time expressions",
        [
            ("Common Irregular Verbs", "Verbos Irregulares Comunes", 2350, 55),
            ("Last Week", "La Semana Pasada", 2370, 40),
            ("Life Stories", "Historias de Vida", 2390, 35),
            ("Past Tense Irregular Quiz", "Prueba de Pasado Irregular", 2410, 40),
        ],
    ),
    standard_unit(
        "unit-a2-12", 11,
        ("Telling Stories", "Contar Historias"),
        ("Narrate events", "Narra eventos"),
        "narrative and storytelling",
        [
            ("Story Elements", "Elementos de Historia", 2450, 35),
            ("Once Upon a Time", "Érase Una Vez", 2470, 40),
            ("My Story", "Mi Historia", 2490, 35),
            ("Telling Stories Quiz", "Prueba de Contar Historias", 2510, 40),
        ],
    ),
    standard_unit(
        "unit-a2-13", 12,
        ("Future Plans", "Planes Futuros"),
        ("Future intentions", "Intenciones futuras"),
        "time expressions",
        [
            ("Dreams and Goals", "Sueños y Metas", 2550, 45),
            ("What Will You Do?", "¿Qué Harás?", 2570, 60),
            ("Planning Ahead", "Planificando el Futuro", 2590, 35),
            ("Future Plans Quiz", "Prueba de Planes Futuros", 2610, 40),
        ],
    ),
    standard_unit(
        "unit-a2-14", 13,
        ("Health & Body", "Salud y Cuerpo"),
        ("Body and health", "Cuerpo y salud"),
        "body parts",
        [
            ("Body Parts", "Partes del Cuerpo", 2650, 55),
            ("How Do You Feel?", "¿Cómo Te Sientes?", 2670, 60),
            ("Healthy Living", "Vida Saludable", 2690, 55),
            ("Health & Body Quiz", "Prueba de Salud y Cuerpo", 2710, 60),
        ],
    ),
    standard_unit(
        "unit-a2-15", 14,
        ("At the Doctor's", "En el Médico"),
        ("Medical visits", "Visitas médicas"),
        "health",
        [
            ("Medical Terms", "Términos Médicos", 2750, 45),
            ("Visiting the Doctor", "Visitando al Doctor", 2770, 60),
            ("Health Concerns", "Preocupaciones de Salud", 2790, 55),
            ("At the Doctor's Quiz", "Prueba de En el Médico", 2810, 60),
        ],
    ),
    standard_unit(
        "unit-a2-16", 15,
        ("Jobs & Professions", "Trabajos"),
        ("Different careers", "Diferentes carreras"),
        "careers",
        [
            ("Career Words", "Trabajos - Vocabulario", 2850, 35),
            ("What Do You Do?", "Trabajos - Práctica", 2870, 50),
            ("Dream Job", "Trabajos - Aplicación", 2890, 55),
            ("Jobs & Professions Quiz", "Prueba de Trabajos", 2910, 60),
        ],
    ),
    standard_unit(
        "unit-a2-17", 16,
        ("School & Education", "Escuela"),
        ("Educational topics", "Temas educativos"),
        "education",
        [
            ("In the Classroom", "Escuela - Vocabulario", 2950, 55),
            ("School Life", "Escuela - Práctica", 2970, 50),
            ("Learning Journey", "Escuela - Aplicación", 2990, 35),
            ("School & Education Quiz", "Prueba de Escuela", 3010, 50),
        ],
    ),
    standard_unit(
        "unit-a2-18", 17,
        ("Technology Basics", "Tecnología"),
        ("Digital life", "Vida digital"),
        "digital communication",
        [
            ("Digital Devices", "Tecnología - Vocabulario", 3050, 55),
            ("Using Technology", "Tecnología - Práctica", 3070, 60),
            ("Connected Life", "Tecnología - Aplicación", 3090, 45),
            ("Technology Basics Quiz", "Prueba de Tecnología", 3110, 60),
        ],
    ),
]
