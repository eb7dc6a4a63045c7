# Precision (in bits) used when a caller does not give one. The solver itself never reads this;
# it is only the default for the demo script and the request models.
DEFAULT_PRECISION = 128

# Newton's method parameters.
MAX_ITERS = 100
DEFAULT_TOLERANCE = '1e-25'
DEFAULT_ROUNDING = 'nearest'

# Parameters relating to the multi-start search for unique solutions.
MAX_SEARCH_POINTS = 200
MAX_CONVERGED_SEARCH_POINTS_SINCE_LAST_NEW_SOLUTION = 30
EPSILON = 1e-8

# Number of threads used to run independent solves side by side.
MAX_WORKERS = 4

# Number of significant decimal digits printed for solutions and residuals.
REPORT_DIGITS = 30


import os
from pathlib import Path
LOGS_DIR = Path(os.path.realpath(__file__)).parent.parent/'logs'
