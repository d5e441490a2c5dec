"""
Storage Backend Module

Provides the abstract storage interface and the in-memory implementation
backing the account ledger and the audit trail. Records are plain
JSON-compatible dictionaries keyed by an id within a named table.
"""

from abc import ABC, abstractmethod
from typing import Dict, Hashable, List, Optional, Any, Mapping
import json
import threading


class StorageInterface(ABC):
    """Abstract interface for storage backends"""
    
    @abstractmethod
    def save(self, table: str, record_id: Hashable, data: Dict[str, Any]) -> None:
        """Save a record to storage, replacing any record with the same id"""
        pass
    
    @abstractmethod
    def load(self, table: str, record_id: Hashable) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass
    
    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass
    
    @abstractmethod
    def exists(self, table: str, record_id: Hashable) -> bool:
        """Check if a record exists"""
        pass
    
    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass
    
    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass
    
    @abstractmethod
    def replace_table(self, table: str, records: Mapping[Hashable, Dict[str, Any]]) -> None:
        """Atomically replace the whole contents of a table"""
        pass
    
    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass
    
    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation, lives for the process lifetime"""
    
    def __init__(self):
        self._data: Dict[str, Dict[Hashable, Dict[str, Any]]] = {}
        # One lock over the whole store serializes every replace
        self._lock = threading.RLock()
    
    @staticmethod
    def _copy(record: Dict[str, Any]) -> Dict[str, Any]:
        # Deep copy to prevent external mutation
        return json.loads(json.dumps(record, default=str))
    
    def _ensure_table(self, table: str) -> None:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}
    
    def save(self, table: str, record_id: Hashable, data: Dict[str, Any]) -> None:
        """Save a record to memory"""
        with self._lock:
            self._ensure_table(table)
            self._data[table][record_id] = self._copy(data)
    
    def load(self, table: str, record_id: Hashable) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(record_id)
            if record is not None:
                return self._copy(record)
            return None
    
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            return [self._copy(record) for record in self._data[table].values()]
    
    def exists(self, table: str, record_id: Hashable) -> bool:
        """Check if a record exists"""
        with self._lock:
            self._ensure_table(table)
            return record_id in self._data[table]
    
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        with self._lock:
            self._ensure_table(table)
            results = []
            for record in self._data[table].values():
                match = True
                for key, value in filters.items():
                    if key not in record or record[key] != value:
                        match = False
                        break
                if match:
                    results.append(self._copy(record))
            return results
    
    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])
    
    def replace_table(self, table: str, records: Mapping[Hashable, Dict[str, Any]]) -> None:
        """Replace a table's contents in one step"""
        # Copy before taking the lock so a bad record leaves the table untouched
        new_table = {record_id: self._copy(data) for record_id, data in records.items()}
        with self._lock:
            self._data[table] = new_table
    
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            self._data[table] = {}
    
    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass
    
    def get_all_data(self) -> Dict[str, Dict[Hashable, Dict[str, Any]]]:
        """Get all data for debugging/inspection"""
        with self._lock:
            return {
                table: {record_id: self._copy(record) for record_id, record in records.items()}
                for table, records in self._data.items()
            }
