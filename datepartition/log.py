import logging

from datepartition.conf import settings


def get_logger():
    return logging.getLogger(settings.DATEPARTITION_LOGGER)
