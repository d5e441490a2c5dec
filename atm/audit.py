"""
Audit Trail Module

Hash-chained audit log with SHA-256 for tamper detection.
Every ledger mutation and customer session boundary is logged here.
"""

import hashlib
import json
import threading
from datetime import datetime, timezone
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional, Any
from enum import Enum
import uuid

from .storage import StorageInterface


class AuditEventType(Enum):
    """Types of audit events"""
    # Ledger events
    LEDGER_INITIALIZED = "ledger_initialized"
    BALANCE_UPDATED = "balance_updated"
    
    # Teller events
    WITHDRAWAL = "withdrawal"
    DEPOSIT = "deposit"
    
    # Session events
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    
    # System events
    SYSTEM_START = "system_start"
    SYSTEM_STOP = "system_stop"


@dataclass
class AuditEvent:
    """
    Immutable audit event with hash chaining for tamper detection
    """
    id: str
    sequence: int
    created_at: datetime
    event_type: AuditEventType
    entity_type: str  # account, session, ledger, system
    entity_id: str
    previous_hash: str
    current_hash: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None
    
    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash to prevent circular reference
        """
        hash_data = {
            'id': self.id,
            'sequence': self.sequence,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'session_id': self.session_id,
            'metadata': self.metadata
        }
        
        # Create deterministic JSON string
        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()
    
    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        result['created_at'] = self.created_at.isoformat()
        result['event_type'] = self.event_type.value
        return result
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        """Create AuditEvent from a stored dictionary"""
        data = dict(data)
        if isinstance(data['created_at'], str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if isinstance(data['event_type'], str):
            data['event_type'] = AuditEventType(data['event_type'])
        return cls(**data)


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection
    """
    
    def __init__(self, storage: StorageInterface, table_name: str = "audit_events"):
        self.storage = storage
        self.table_name = table_name
        self._lock = threading.Lock()
        self._last_hash = ""
        self._sequence = 0
        self._load_last_event()
    
    def _load_last_event(self) -> None:
        """Resume the chain from whatever is already in storage"""
        events = self.storage.load_all(self.table_name)
        if events:
            last = max(events, key=lambda e: e['sequence'])
            self._last_hash = last['current_hash']
            self._sequence = last['sequence']
    
    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Any,
        metadata: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None
    ) -> AuditEvent:
        """
        Log an audit event with hash chaining
        
        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity (stored as a string)
            metadata: Additional event-specific data, must be JSON serializable
            session_id: Customer session identifier
            
        Returns:
            Created AuditEvent
        """
        with self._lock:
            event = AuditEvent(
                id=str(uuid.uuid4()),
                sequence=self._sequence + 1,
                created_at=datetime.now(timezone.utc),
                event_type=event_type,
                entity_type=entity_type,
                entity_id=str(entity_id),
                previous_hash=self._last_hash,
                current_hash="",
                metadata=metadata or {},
                session_id=session_id
            )
            event.current_hash = event.calculate_hash()
            
            self.storage.save(self.table_name, event.id, event.to_dict())
            
            self._last_hash = event.current_hash
            self._sequence = event.sequence
            return event
    
    def _events(self) -> List[AuditEvent]:
        events = [AuditEvent.from_dict(data) for data in self.storage.load_all(self.table_name)]
        events.sort(key=lambda e: e.sequence)
        return events
    
    def get_events_for_entity(
        self,
        entity_type: str,
        entity_id: Any,
        limit: Optional[int] = None
    ) -> List[AuditEvent]:
        """Get audit events for one entity, oldest first"""
        events = [
            e for e in self._events()
            if e.entity_type == entity_type and e.entity_id == str(entity_id)
        ]
        if limit:
            events = events[-limit:]  # Most recent N events
        return events
    
    def get_events_by_type(
        self,
        event_type: AuditEventType,
        limit: Optional[int] = None
    ) -> List[AuditEvent]:
        """Get audit events of one type, oldest first"""
        events = [e for e in self._events() if e.event_type == event_type]
        if limit:
            events = events[-limit:]
        return events
    
    def get_all_events(self) -> List[AuditEvent]:
        """Get all audit events in chain order"""
        return self._events()
    
    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain
        
        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': []
        }
        
        events = self._events()
        result['total_events'] = len(events)
        
        previous_hash = ""
        for i, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash
        
        return result
    
    def count_events(self) -> int:
        """Get total number of audit events"""
        return self.storage.count(self.table_name)
    
    def get_latest_hash(self) -> str:
        """Get the hash of the most recent audit event"""
        return self._last_hash
