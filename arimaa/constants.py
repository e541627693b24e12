"""Constants for Arimaa setup."""

### Sides
GOLD = 1
SILVER = -1
EMPTY = 0
SIDES = (GOLD, SILVER)
SIDE_NAMES = {GOLD: "gold", SILVER: "silver"}
SIDE_CHARS = {GOLD: "g", SILVER: "s"}
CHAR_SIDES = {v: k for k, v in SIDE_CHARS.items()}

### Pieces
ELEPHANT = 1
CAMEL = 2
HORSE = 3
DOG = 4
CAT = 5
RABBIT = 6
KINDS = (ELEPHANT, CAMEL, HORSE, DOG, CAT, RABBIT)

# Dog outranks Horse. Push/pull legality depends on this exact table.
STRENGTH = {ELEPHANT: 6, CAMEL: 5, DOG: 4, HORSE: 3, CAT: 2, RABBIT: 1}
KIND_LETTERS = {ELEPHANT: "E", CAMEL: "M", HORSE: "H", DOG: "D", CAT: "C", RABBIT: "R"}
LETTER_KINDS = {v: k for k, v in KIND_LETTERS.items()}
KIND_NAMES = {
    ELEPHANT: "elephant",
    CAMEL: "camel",
    HORSE: "horse",
    DOG: "dog",
    CAT: "cat",
    RABBIT: "rabbit",
}

EXPECTED_COUNTS = {RABBIT: 8, CAT: 2, DOG: 2, HORSE: 2, CAMEL: 1, ELEPHANT: 1}

### Board
BOARD_DIM = 8
TRAPS = ((2, 2), (2, 5), (5, 2), (5, 5))
# Row index order: north first, then south, west, east.
ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIRECTIONS = {"n": (-1, 0), "s": (1, 0), "w": (0, -1), "e": (0, 1)}
OFFSET_DIRECTIONS = {v: k for k, v in DIRECTIONS.items()}

HOME_ROWS = {GOLD: (6, 7), SILVER: (0, 1)}
GOAL_ROW = {GOLD: 0, SILVER: BOARD_DIM - 1}
# Row delta of a forward rabbit step.
FORWARD = {GOLD: -1, SILVER: 1}

files = "abcdefgh"
ranks = "12345678"

tuple2square = {
    (i, j): files[j] + ranks[BOARD_DIM - 1 - i] for i in range(BOARD_DIM) for j in range(BOARD_DIM)
}

square2tuple = {v: k for k, v in tuple2square.items()}

SQUARES = list(square2tuple.keys())

STANDARD_LAYOUT = {
    GOLD: {
        7: [ELEPHANT, CAMEL, HORSE, DOG, DOG, HORSE, CAT, CAT],
        6: [RABBIT] * BOARD_DIM,
    },
    SILVER: {
        0: [CAT, CAT, HORSE, DOG, DOG, HORSE, CAMEL, ELEPHANT],
        1: [RABBIT] * BOARD_DIM,
    },
}

### Turns
MAX_STEPS_PER_TURN = 4
SETUP_TURN = 1
PASS_SYMBOL = "-"

### Clock (seconds)
MAX_TURN_DURATION = 90.0
MAX_TOTAL_DURATION = 35 * 60.0
TICK_INTERVAL = 0.5
