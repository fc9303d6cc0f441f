"""
Interchangeable employee record stores.
"""

from .base import IRecordStore, IRealtimeRecordStore, ISubscription
from .kv_store import LocalKeyValueStore
from .sqlite_store import SQLiteRecordStore
from .supabase_store import ChangeSubscription, SupabaseRecordStore

__all__ = [
    'IRecordStore',
    'IRealtimeRecordStore',
    'ISubscription',
    'LocalKeyValueStore',
    'SQLiteRecordStore',
    'ChangeSubscription',
    'SupabaseRecordStore',
]
