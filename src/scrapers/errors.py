# src/scrapers/errors.py

"""Exception taxonomy for the scraping pipeline."""


class ScrapeError(Exception):
    """Base class for failures inside the scraping pipeline."""


class FetchError(ScrapeError):
    """Network, HTTP status, timeout, navigation or selector-wait failure."""


class ExtractionError(ScrapeError):
    """Malformed structured payload or unparseable model output."""


class CollaboratorError(Exception):
    """The text-generation collaborator failed or returned nothing."""


class TargetNotFoundError(KeyError):
    """No target with the requested id exists in the catalog."""

    def __init__(self, target_id: str) -> None:
        super().__init__(target_id)
        self.target_id = target_id

    def __str__(self) -> str:
        return f"Unknown target: {self.target_id}"
