import pathlib

# Layer configuration: (slot, directory, color_linked, probability)
# Listed in draw order, first entry is drawn first (lowest z-rank).
LAYERS = [
    ("body", "body/bodies", True, 1.0),
    ("legs", "legs", False, 1.0),
    ("feet", "feet", False, 1.0),
    ("torso", "torso/clothes", False, 1.0),
    ("head", "head/heads", True, 1.0),
    ("hair", "hair", False, 0.9),
    ("facial", "facial", False, 0.3),
]

SLOTS = [name for name, _, _, _ in LAYERS]
Z_RANK = {name: rank for rank, name in enumerate(SLOTS)}
COLOR_LINKED = {name: linked for name, _, linked, _ in LAYERS}
PROBABILITY = {name: probability for name, _, _, probability in LAYERS}

# Body buckets, "universal" assets fit every bucket
BUCKETS = ["male", "female", "teen", "child"]
UNIVERSAL = "universal"

ROLES = [
    "shopkeeper", "student", "retiree", "mechanic", "teacher", "parent",
    "toddler", "teenager", "nurse", "cashier", "barista", "driver",
    "gardener", "chef", "delivery", "clerk", "coach", "farmer", "librarian",
    "police", "mail", "firefighter", "janitor", "server", "babysitter",
    "artist", "musician", "carpenter", "plumber", "electrician",
    "receptionist", "security", "groundskeeper", "courier", "volunteer",
    "neighbor", "friend", "child", "sibling", "grandparent",
]

FIRST_NAMES = [
    "ada", "ben", "cleo", "dev", "elena", "finn", "gus", "hana", "ivan",
    "june", "kai", "lena", "milo", "nora", "omar", "pia", "quinn", "rosa",
    "sam", "tara", "uma", "vic", "wren", "yara", "zoe",
]

CREATURE_TYPE = "Humanoid"

# Run defaults
DEFAULT_COUNT = 100
ASSETS_PATH = pathlib.Path("spritesheets")
OUTPUT_PATH = pathlib.Path("prefab")
CREDITS_FILE = "credits.csv"
MAX_RETRIES = 1000
