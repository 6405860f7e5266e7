"""Constants and column definitions for the toad light-wavelength pilot data."""

# Default file stems searched in the data directory
BEHAVIOR_FILE = "behavior"
SURVIVAL_FILE = "survival"
GENE_EXPRESSION_FILE = "gene_expression"
CORTICOSTERONE_FILE = "corticosterone"

DATASET_FILES = {
    "behavior": BEHAVIOR_FILE,
    "survival": SURVIVAL_FILE,
    "gene_expression": GENE_EXPRESSION_FILE,
    "corticosterone": CORTICOSTERONE_FILE,
}

# Extensions tried in order when looking for a dataset file
SUPPORTED_EXTENSIONS = [".csv", ".tsv", ".txt", ".xlsx", ".xls"]

# Canonical column names (after standardize_columns)
CONDITION_COL = "wavelength"
TIME_COL = "zt"
SIGNAL_COL = "gene"
ANIMAL_COL = "toad_id"

ACTIVITY_COL = "activity"
WAVELENGTH_NM_COL = "wavelength_nm"
DAY_COL = "day"
DURATION_COL = "days"
EVENT_COL = "died"
EXPRESSION_COL = "expression"
CORT_COL = "cort"

REQUIRED_COLUMNS = {
    "behavior": [CONDITION_COL, ACTIVITY_COL],
    "survival": [CONDITION_COL, DURATION_COL, EVENT_COL],
    "gene_expression": [SIGNAL_COL, CONDITION_COL, TIME_COL, EXPRESSION_COL],
    "corticosterone": [CONDITION_COL, TIME_COL, CORT_COL],
}

# Spreadsheet headers seen in lab exports -> canonical names
COLUMN_ALIASES = {
    "animal": ANIMAL_COL,
    "animal_id": ANIMAL_COL,
    "toad": ANIMAL_COL,
    "id": ANIMAL_COL,
    "treatment": CONDITION_COL,
    "light": CONDITION_COL,
    "condition": CONDITION_COL,
    "color": CONDITION_COL,
    "colour": CONDITION_COL,
    "nm": WAVELENGTH_NM_COL,
    "lambda_nm": WAVELENGTH_NM_COL,
    "time": TIME_COL,
    "zeitgeber_time": TIME_COL,
    "timepoint": TIME_COL,
    "gene_id": SIGNAL_COL,
    "target": SIGNAL_COL,
    "relative_expression": EXPRESSION_COL,
    "fold_change": EXPRESSION_COL,
    "cort_ng_ml": CORT_COL,
    "corticosterone": CORT_COL,
    "activity_score": ACTIVITY_COL,
    "survival_days": DURATION_COL,
    "duration": DURATION_COL,
    "time_to_event": DURATION_COL,
    "dead": EVENT_COL,
    "death": EVENT_COL,
    "event": EVENT_COL,
    "status": EVENT_COL,
}

# Fixed reporting order for light conditions; unknown labels follow, sorted
CONDITION_ORDER = ["White", "Blue", "Green", "Red", "Dark"]

# Label used as the signal identifier for single-signal rhythm data
CORTICOSTERONE_SIGNAL = "corticosterone"

# Cosine model
PERIOD_HOURS = 24.0
MIN_TIMEPOINTS = 3
INITIAL_AMPLITUDE = 1.0
INITIAL_PHASE = 12.0
# Levenberg-Marquardt iterations; each costs one evaluation per parameter plus one
MAX_ITERATIONS = 100
CI_Z = 1.96

# Display rounding
AMPLITUDE_DECIMALS = 4
PHASE_DECIMALS = 2

# Rhythm classifications
RHYTHMIC = "rhythmic"
NON_RHYTHMIC = "non_rhythmic"
FIT_FAILED = "fit_failed"
INSUFFICIENT_DATA = "insufficient_data"

CLASSIFICATION_LABELS = {
    RHYTHMIC: "Rhythmic",
    NON_RHYTHMIC: "Not rhythmic",
    FIT_FAILED: "Fit error",
    INSUFFICIENT_DATA: "Too few points",
}

# Significance threshold used across tests
ALPHA = 0.05
