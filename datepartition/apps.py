from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class DatePartitionConfig(AppConfig):
    name = "datepartition"
    verbose_name = _("Date partitions")

    def ready(self):
        from datepartition import conf  # noqa: F401
