"""Reference volcano data.

Philippine entries: PHIVOLCS active and potentially active volcano lists,
with station counts and hydrothermal survey levels (0 none, 1 minor,
2 moderate, 3 vigorous). Global entries: Smithsonian Global Volcanism
Program. Ids are GVP volcano numbers.

Update when PHIVOLCS revises its network or volcano classification.
"""

from volcanic_risk.models import GlobalVolcano, PhilippineVolcano

PHILIPPINE_VOLCANOES: list[PhilippineVolcano] = [
    # Luzon
    PhilippineVolcano("273030", "Taal", 14.002, 120.993, 311, "Caldera", "active", "Batangas", "2022", 3, 15),
    PhilippineVolcano("273083", "Mayon", 13.257, 123.685, 2462, "Stratovolcano", "active", "Albay", "2024", 2, 12),
    PhilippineVolcano("273054", "Pinatubo", 15.130, 120.350, 1486, "Stratovolcano", "active", "Zambales", "1991", 2, 8),
    PhilippineVolcano("273010", "Bulusan", 12.770, 124.050, 1559, "Stratovolcano", "active", "Sorsogon", "2022", 2, 6),
    PhilippineVolcano("270010", "Iraya", 20.469, 122.010, 1009, "Stratovolcano", "active", "Batanes", "1454", 1, 2),
    PhilippineVolcano("270020", "Babuyan Claro", 19.523, 121.940, 1080, "Stratovolcano", "active", "Cagayan", "1924", 2, 1),
    PhilippineVolcano("270030", "Camiguin de Babuyanes", 18.831, 121.860, 712, "Stratovolcano", "active", "Cagayan", "1857", 2, 1),
    PhilippineVolcano("270040", "Didicas", 19.077, 122.202, 228, "Compound volcano", "active", "Cagayan", "1978", 2, 0),
    PhilippineVolcano("270050", "Cagua", 18.222, 122.123, 1133, "Stratovolcano", "active", "Cagayan", "1907", 2, 2),
    PhilippineVolcano("271090", "Smith", 19.540, 121.915, 688, "Stratovolcano", "active", "Cagayan", "1924", 2, 0),
    # Visayas
    PhilippineVolcano("273020", "Canlaon", 10.412, 123.132, 2435, "Stratovolcano", "active", "Negros Oriental", "2024", 2, 7),
    PhilippineVolcano("272020", "Biliran", 11.523, 124.535, 1301, "Stratovolcano", "active", "Biliran", "1939", 2, 2),
    PhilippineVolcano("272040", "Cabalian", 10.287, 125.220, 945, "Stratovolcano", "active", "Southern Leyte", "Holocene", 2, 1),
    # Mindanao
    PhilippineVolcano("271030", "Mount Apo", 6.9875, 125.2711, 2954, "Stratovolcano", "potentially_active", "Davao del Sur", None, 3, 1),
    PhilippineVolcano("271100", "Mount Talomo", 7.095, 125.455, 2674, "Stratovolcano", "potentially_active", "Davao del Sur", None, 2, 0),
    PhilippineVolcano("271010", "Hibok-Hibok", 9.203, 124.673, 1332, "Stratovolcano", "active", "Camiguin", "1953", 2, 4),
    PhilippineVolcano("271020", "Musuan", 7.877, 125.068, 646, "Lava dome", "active", "Bukidnon", "Holocene", 1, 1),
    PhilippineVolcano("271040", "Matutum", 6.360, 125.078, 2286, "Stratovolcano", "active", "South Cotabato", "Holocene", 2, 2),
    PhilippineVolcano("271050", "Parker", 6.113, 124.892, 1824, "Stratovolcano", "active", "South Cotabato", "1641", 2, 3),
    PhilippineVolcano("271060", "Ragang", 7.677, 124.507, 2815, "Stratovolcano", "active", "Lanao del Sur", "1916", 2, 2),
    PhilippineVolcano("271070", "Makaturing", 7.647, 124.320, 1940, "Stratovolcano", "active", "Lanao del Sur", "1858", 2, 1),
    PhilippineVolcano("271080", "Leonard Kniaseff", 5.850, 126.042, -60, "Submarine volcano", "active", "Tawi-Tawi", "1897", 3, 0),
    PhilippineVolcano("260020", "Bud Dajo", 5.952, 121.072, 600, "Stratovolcano", "potentially_active", "Sulu", "Holocene", 1, 0),
]

GLOBAL_VOLCANOES: list[GlobalVolcano] = [
    GlobalVolcano("282080", "Sakurajima", 31.593, 130.657, 1117, "Stratovolcano", "active", "Japan", "2024"),
    GlobalVolcano("332010", "Kilauea", 19.421, -155.287, 1222, "Shield", "active", "USA", "2024"),
    GlobalVolcano("211060", "Etna", 37.748, 14.999, 3357, "Stratovolcano", "active", "Italy", "2024"),
    GlobalVolcano("211010", "Campi Flegrei", 40.827, 14.139, 458, "Caldera", "active", "Italy", "1538"),
    GlobalVolcano("263250", "Merapi", -7.540, 110.446, 2910, "Stratovolcano", "active", "Indonesia", "2024"),
    GlobalVolcano("241100", "Ruapehu", -39.280, 175.570, 2797, "Stratovolcano", "active", "New Zealand", "2007"),
    GlobalVolcano("372070", "Hekla", 63.983, -19.666, 1490, "Stratovolcano", "active", "Iceland", "2000"),
]
