"""Fixed climate division universe and defaults."""

import numpy as np

N_DIVISIONS = 344
DIVISION_IDS = np.arange(1, N_DIVISIONS + 1, dtype=np.int32)

MISSING_SENTINEL = -9999.0

# Division map code meaning "gridpoint is not in any division"
NO_DIVISION = 0

# Case-insensitive tokens that mark a gridpoint outside every division
NO_DIVISION_TOKENS = ("", "na", "n/a", "nan", "none", "null")
