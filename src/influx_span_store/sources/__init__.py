# Sources module
from .interfaces import SpanStore, TraceQueryer
from .influxdb_store import InfluxDBStore, InfluxDBStoreConfig
from .point_codec import TaggedRecord, encode, decode, merge_fields
from .queries import InfluxQuery, select_spans, select_children

__all__ = [
    "SpanStore",
    "TraceQueryer",
    "InfluxDBStore",
    "InfluxDBStoreConfig",
    "TaggedRecord",
    "encode",
    "decode",
    "merge_fields",
    "InfluxQuery",
    "select_spans",
    "select_children",
]
