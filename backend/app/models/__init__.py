from app.models.customer import Customer
from app.models.daily_rate import DailyRate
from app.models.draft import DraftCard, DraftClarification
from app.models.ledger import Ledger

__all__ = ["Customer", "DailyRate", "DraftCard", "DraftClarification", "Ledger"]
