from django.apps import AppConfig


class BoxOfficeConfig(AppConfig):
    name = "boxoffice"
    verbose_name = "Box Office"

    def ready(self) -> None:
        from boxoffice import signals  # noqa: F401
