from careops.models.workspace import Workspace
from careops.models.contact import Contact
from careops.models.booking import Booking, BookingStatus
from careops.models.conversation import Conversation, Message, MessageSender, ConversationStatus
from careops.models.form import Form, FormSubmission, FormStatus, FormFieldType
from careops.models.inventory import InventoryItem
from careops.models.alert import Alert, AlertType
