from imagifine.models.user import User
from imagifine.models.credit_transaction import CreditTransaction
from imagifine.models.contact import ContactSubmission

__all__ = ["User", "CreditTransaction", "ContactSubmission"]
