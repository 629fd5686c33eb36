"""应用服务"""

from scrawl.application.services.admission_gate import AdmissionGate
from scrawl.application.services.draft_ledger import DraftLedger
from scrawl.application.services.protocol_messages import build_message

__all__ = ["AdmissionGate", "DraftLedger", "build_message"]
