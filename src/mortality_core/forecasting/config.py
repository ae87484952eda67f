"""Configuration constants for the excess mortality pipeline."""

# Raw CSV columns and the names they are renamed to on load
RAW_COLUMNS = {"series_name": "Age", "parameter": "Date", "value": "Deaths"}

# Cohort of interest
DEFAULT_COHORT = "80 and over"

# Training uses dates strictly before this cutoff; excess is accumulated from it
CUTOFF_DATE = "2020-01-01"

# Forecast horizon in days past the last training date
HORIZON_DAYS = 750

# Posterior draws (chains) per time step
N_SAMPLES = 4000

# Fewer chains than this gives unstable 5th/95th percentile estimates
MIN_SAMPLES = 1000

# Credible band for the cumulative excess
LOWER_PERCENTILE = 5.0
UPPER_PERCENTILE = 95.0

# Width of the forecast interval (matches the 5%-95% band)
INTERVAL_WIDTH = 0.90

# Two years of observations are needed to separate trend from yearly seasonality
MIN_TRAINING_OBSERVATIONS = 24

# Weekly counts are averaged to calendar months (dated at month start)
AGGREGATION_FREQ = "MS"

RANDOM_SEED = 2021
