import logging

from django.conf import settings

# Column holding the value the table is range partitioned on
settings.DATEPARTITION_COLUMN_NAME = getattr(
    settings, "DATEPARTITION_COLUMN_NAME", "date_partition_column"
)

# Column definition used when the partition column has to be added
settings.DATEPARTITION_COLUMN_DEFINITION = getattr(
    settings, "DATEPARTITION_COLUMN_DEFINITION", "DATE NOT NULL DEFAULT (CURRENT_DATE)"
)

# Name of the MAXVALUE partition catching rows past the last boundary
settings.DATEPARTITION_CATCHALL_NAME = getattr(
    settings, "DATEPARTITION_CATCHALL_NAME", "p_future"
)

# One of "day", "month" or "year"
settings.DATEPARTITION_GRANULARITY = getattr(
    settings, "DATEPARTITION_GRANULARITY", "day"
)

# Number of granularity units "datepartition update" keeps ahead of today
settings.DATEPARTITION_AHEAD = getattr(settings, "DATEPARTITION_AHEAD", 30)

# Seconds to wait for the per-table maintenance lock
settings.DATEPARTITION_LOCK_TIMEOUT = getattr(
    settings, "DATEPARTITION_LOCK_TIMEOUT", 10
)

# Logging
settings.DATEPARTITION_LOGGER = getattr(
    settings, "DATEPARTITION_LOGGER", "datepartition"
)
settings.DATEPARTITION_LEVEL = getattr(settings, "DATEPARTITION_LEVEL", logging.INFO)
