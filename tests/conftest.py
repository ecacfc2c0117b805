"""
Shared fixtures: an in-memory stand-in for ``influxdb.InfluxDBClient``.

The fake understands the InfluxQL subset the span store emits (equality and
inequality on tags, AND, OR, ``GROUP BY *`` and ``SLIMIT``). Like InfluxDB, a
write to an existing series and timestamp updates that point with the union of
old and new fields, new values winning; any other write adds a row to its
row-group.
"""

import itertools
import re
from typing import Any, Dict, List, Optional

import pytest
from influxdb.resultset import ResultSet

from influx_span_store import InfluxDBStore, InfluxDBStoreConfig, format_id


_SELECT_PATTERN = re.compile(
    r'^SELECT \* FROM "(?P<measurement>[^"]+)" WHERE (?P<where>.+?) GROUP BY \*(?: SLIMIT (?P<limit>\d+))?$'
)
_CONDITION_PATTERN = re.compile(r"^(?P<tag>\w+)(?P<op>!=|=)'(?P<value>[^']*)'$")


class FakeInfluxDBClient:
    """In-memory InfluxDB."""

    def __init__(self):
        self.points: List[Dict[str, Any]] = []
        self.databases = set()
        self.queries = []
        self.writes = []
        self.closed = False
        self._clock = itertools.count(1_700_000_000_000_000_000, 1_000)

    def create_database(self, dbname):
        self.databases.add(dbname)

    def ping(self):
        return "1.8.10"

    def close(self):
        self.closed = True

    def write_points(self, points, time_precision=None, database=None, retention_policy=None, **kwargs):
        self.writes.append({"points": points, "database": database, "retention_policy": retention_policy})
        for point in points:
            stored = {
                "measurement": point["measurement"],
                "tags": dict(point["tags"]),
                "fields": dict(point["fields"]),
                "time": point.get("time", next(self._clock)),
            }
            existing = self._point_at(stored)
            if existing is not None:
                existing["fields"].update(stored["fields"])
            else:
                self.points.append(stored)
        return True

    def _point_at(self, point):
        for candidate in self.points:
            if (candidate["measurement"], candidate["tags"], candidate["time"]) == (
                    point["measurement"], point["tags"], point["time"]):
                return candidate
        return None

    def add_point(self, trace: int, span: int, parent: int, fields: Dict[str, Any],
                  time: Optional[int] = None, measurement: str = "spans"):
        """Store a point directly, bypassing the store's write path."""
        self.write_points([{
            "measurement": measurement,
            "tags": {"trace_id": format_id(trace), "span_id": format_id(span), "parent_id": format_id(parent)},
            "fields": fields,
            "time": time if time is not None else next(self._clock),
        }])

    def query(self, query, params=None, bind_params=None, epoch=None, database=None, **kwargs):
        self.queries.append({"query": query, "bind_params": dict(bind_params or {}), "epoch": epoch})
        return ResultSet({"statement_id": 0, "series": self._select(query, bind_params or {})})

    def _select(self, query: str, bind_params: Dict[str, str]) -> List[Dict[str, Any]]:
        text = re.sub(r"\$(\w+)", lambda m: f"'{bind_params[m.group(1)]}'", query)
        match = _SELECT_PATTERN.match(text)
        assert match, f"unsupported query: {text}"

        clauses = []
        for clause in match.group("where").split(" OR "):
            conditions = []
            for condition in clause.strip("()").split(" AND "):
                parsed = _CONDITION_PATTERN.match(condition)
                assert parsed, f"unsupported condition: {condition}"
                conditions.append((parsed.group("tag"), parsed.group("op"), parsed.group("value")))
            clauses.append(conditions)

        matching = [
            point for point in self.points
            if point["measurement"] == match.group("measurement")
            and any(all(_holds(point["tags"], *c) for c in conditions) for conditions in clauses)
        ]
        if not matching:
            return []

        columns = ["time"] + sorted({key for point in matching for key in point["fields"]})
        groups: Dict[tuple, List[Dict[str, Any]]] = {}
        for point in matching:
            groups.setdefault(tuple(sorted(point["tags"].items())), []).append(point)

        series = []
        for tags in sorted(groups):
            rows = sorted(groups[tags], key=lambda p: p["time"])
            series.append({
                "name": match.group("measurement"),
                "tags": dict(tags),
                "columns": columns,
                "values": [[p["time"]] + [p["fields"].get(key) for key in columns[1:]] for p in rows],
            })
        if match.group("limit"):
            series = series[:int(match.group("limit"))]
        return series


def _holds(tags, tag, op, value):
    if op == "=":
        return tags.get(tag) == value
    return tags.get(tag) != value


@pytest.fixture
def fake_client() -> FakeInfluxDBClient:
    """Empty in-memory InfluxDB."""
    return FakeInfluxDBClient()


@pytest.fixture
def store(fake_client) -> InfluxDBStore:
    """Span store writing to the in-memory InfluxDB."""
    return InfluxDBStore(InfluxDBStoreConfig(client=fake_client))
