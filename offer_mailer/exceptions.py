"""
Error Taxonomy

Every failure the pipeline raises is an OfferMailerError; the API layer
collapses them into its JSON error shape.
"""


class OfferMailerError(Exception):
    """Base class for offer letter pipeline failures"""


class IngestionError(OfferMailerError):
    """The uploaded roster could not be parsed into any usable rows"""


class RenderError(OfferMailerError):
    """A letter or email template, or the PDF document, failed to render"""


class DispatchError(OfferMailerError):
    """An email could not be handed to the SMTP relay"""


class JobNotFoundError(OfferMailerError):
    """No generated batch exists for the requested job id"""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} not found or expired")
        self.job_id = job_id
