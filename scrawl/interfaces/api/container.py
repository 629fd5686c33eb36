"""API Container (composition root state holder).

This module only defines the structure of objects created in the real
composition root (`scrawl/interfaces/api/main.py`).
"""

from __future__ import annotations

from dataclasses import dataclass

from scrawl.application.services.admission_gate import AdmissionGate
from scrawl.application.services.draft_ledger import DraftLedger
from scrawl.domain.ports.blob_store import BlobStore
from scrawl.domain.ports.credential_service import CredentialService
from scrawl.domain.ports.durable_store import DurableStore
from scrawl.infrastructure.websocket.canvas_sync import CanvasSyncService
from scrawl.infrastructure.websocket.session_registry import SessionRegistry


@dataclass(frozen=True, slots=True)
class ApiContainer:
    """Typed container attached to `app.state.container`."""

    store: DurableStore
    credentials: CredentialService
    blob_store: BlobStore

    registry: SessionRegistry
    ledger: DraftLedger
    gate: AdmissionGate
    canvas_sync: CanvasSyncService

    room_capacity: int = 2
    max_upload_bytes: int = 10 * 1024 * 1024
