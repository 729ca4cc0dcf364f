from backend.nightnurse.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all
from backend.nightnurse.models.parent_lead import ParentLead  # noqa: F401
from backend.nightnurse.models.caregiver_application import CaregiverApplication  # noqa: F401
from backend.nightnurse.models.newsletter_subscriber import NewsletterSubscriber  # noqa: F401
