from zappi.models.conversation import ConversationSession
from zappi.models.cooldown import Cooldown
from zappi.models.order import Order
from zappi.models.processed_message import ProcessedMessage
