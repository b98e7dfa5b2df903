"""
Aggregation pipeline for composing read views over the ORM models.

A pipeline runs over one base model as an ordered list of stages. The leading
Match/Sort/Skip/Limit stages are compiled into the SELECT statement; from the
first record stage (Lookup, AddFields, Project) onward every stage runs in
memory, in order, over plain dict records.

Record stages mutate records in place and never copy them, so a Lookup can
still tell which base key each shaped foreign record came from.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import asc, desc, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Expression = Callable[[Record], Any]


def to_record(instance: Any) -> Record:
    """Convert an ORM instance into a dict keyed by column attribute name."""
    mapper = inspect(instance).mapper
    return {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}


def _column(model: Any, name: str):
    mapper = inspect(model)
    if name not in mapper.column_attrs:
        raise ValueError(f"{model.__name__} has no column '{name}'")
    return getattr(model, name)


def _coerce(column: Any, value: Any) -> Any:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if isinstance(value, python_type):
        return value
    return python_type(value)


def _resolve(value: Any, record: Record) -> Any:
    return value(record) if callable(value) else value


# Expressions for AddFields

def size(name: str) -> Expression:
    """Number of items in a list field."""
    return lambda record: len(record.get(name) or [])


def pluck(name: str, key: str) -> Expression:
    """Values of ``key`` from each item of a list field."""
    return lambda record: [item.get(key) for item in record.get(name) or []]


def contains(value: Any, name: str, key: str) -> Expression:
    """True when ``value`` equals ``key`` of any item in a list field."""
    def evaluate(record: Record) -> bool:
        target = _resolve(value, record)
        if target is None:
            return False
        return any(item.get(key) == target for item in record.get(name) or [])
    return evaluate


def cond(if_: Any, then: Any, else_: Any) -> Expression:
    """If/then/else over other expressions or constants."""
    return lambda record: _resolve(then, record) if _resolve(if_, record) else _resolve(else_, record)


class Stage:
    """A single pipeline step."""

    # Stages that can be compiled into SQL while no record stage precedes them
    pushdown: bool = False

    def compile(self, statement, model):
        raise NotImplementedError

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        raise NotImplementedError


class Match(Stage):
    """Keep records whose fields equal the given values."""

    pushdown = True

    def __init__(self, **criteria: Any):
        self.criteria = criteria

    def compile(self, statement, model):
        for name, value in self.criteria.items():
            statement = statement.where(_column(model, name) == value)
        return statement

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        return [
            record for record in records
            if all(record.get(name) == value for name, value in self.criteria.items())
        ]


class Sort(Stage):
    """Order by one or more fields, later fields breaking ties of earlier ones."""

    pushdown = True

    def __init__(self, *fields: str, descending: bool = False):
        if not fields:
            raise ValueError("Sort needs at least one field")
        self.fields = fields
        self.descending = descending

    def compile(self, statement, model):
        direction = desc if self.descending else asc
        return statement.order_by(*[direction(_column(model, name)) for name in self.fields])

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        return sorted(
            records,
            key=lambda record: tuple(record.get(name) for name in self.fields),
            reverse=self.descending
        )


class Skip(Stage):
    pushdown = True

    def __init__(self, count: int):
        if count < 0:
            raise ValueError("Skip count must not be negative")
        self.count = count

    def compile(self, statement, model):
        return statement.offset(self.count)

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        return records[self.count:]


class Limit(Stage):
    pushdown = True

    def __init__(self, count: int):
        if count < 1:
            raise ValueError("Limit count must be positive")
        self.count = count

    def compile(self, statement, model):
        return statement.limit(self.count)

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        return records[:self.count]


class Lookup(Stage):
    """
    Attach records of another model whose ``foreign_field`` equals the
    record's ``local_field``.

    A list-valued local field matches any of its elements and keeps the
    list's order. Matches are attached under ``as_field`` as a list, or as
    the first match (None when there is none) when ``single`` is set. The
    nested pipeline shapes the foreign records before they are attached.
    """

    def __init__(
        self,
        from_model: Any,
        local_field: str,
        foreign_field: str,
        as_field: str,
        pipeline: Sequence[Stage] = (),
        single: bool = False
    ):
        if any(isinstance(stage, (Skip, Limit)) for stage in pipeline):
            raise ValueError("Skip and Limit are not supported inside a lookup pipeline")
        self.from_model = from_model
        self.local_field = local_field
        self.foreign_field = foreign_field
        self.as_field = as_field
        self.pipeline = Pipeline(from_model, pipeline)
        self.single = single

    def _local_values(self, record: Record, column: Any) -> List[Any]:
        value = record.get(self.local_field)
        values = value if isinstance(value, (list, tuple)) else [value]

        local_values = []
        for item in values:
            if item is None:
                continue
            try:
                item = _coerce(column, item)
            except (TypeError, ValueError):
                logger.warning(f"Skipping malformed {self.local_field} value: {item!r}")
                continue
            if item not in local_values:
                local_values.append(item)
        return local_values

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        column = _column(self.from_model, self.foreign_field)
        local_values = {id(record): self._local_values(record, column) for record in records}

        keys = []
        seen = set()
        for values in local_values.values():
            for value in values:
                if value not in seen:
                    seen.add(value)
                    keys.append(value)

        matches: Dict[Any, List[Record]] = {}
        if keys:
            fetched = await self.pipeline.fetch(db, where=column.in_(keys))
            key_of = {id(record): record[self.foreign_field] for record in fetched}
            for shaped in await self.pipeline.shape(fetched, db):
                matches.setdefault(key_of[id(shaped)], []).append(shaped)

        for record in records:
            attached = [
                match
                for value in local_values[id(record)]
                for match in matches.get(value, [])
            ]
            if self.single:
                record[self.as_field] = attached[0] if attached else None
            else:
                record[self.as_field] = attached

        return records


class AddFields(Stage):
    """Set computed fields; each expression sees the fields added before it."""

    def __init__(self, **fields: Any):
        self.fields = fields

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        for record in records:
            for name, expression in self.fields.items():
                record[name] = _resolve(expression, record)
        return records


class Project(Stage):
    """Keep only ``include`` fields (``id`` always stays) or drop ``exclude`` fields."""

    def __init__(self, include: Optional[Sequence[str]] = None, exclude: Optional[Sequence[str]] = None):
        if (include is None) == (exclude is None):
            raise ValueError("Project needs exactly one of include or exclude")
        self.include = set(include) | {"id"} if include is not None else None
        self.exclude = list(exclude) if exclude is not None else None

    async def apply(self, records: List[Record], db: AsyncSession) -> List[Record]:
        for record in records:
            if self.include is not None:
                for name in [name for name in record if name not in self.include]:
                    del record[name]
            else:
                for name in self.exclude:
                    record.pop(name, None)
        return records


class Pipeline:
    """Ordered stages over one base model."""

    def __init__(self, model: Any, stages: Sequence[Stage] = ()):
        self.model = model
        self.stages = list(stages)

        self._pushdown_count = 0
        for stage in self.stages:
            if not stage.pushdown:
                break
            self._pushdown_count += 1

    async def run(self, db: AsyncSession, where: Any = None) -> List[Record]:
        """Execute the pipeline and return the shaped records."""
        logger.debug(
            f"Running pipeline on {self.model.__tablename__}: "
            f"{[type(stage).__name__ for stage in self.stages]}"
        )
        records = await self.fetch(db, where=where)
        return await self.shape(records, db)

    async def fetch(self, db: AsyncSession, where: Any = None) -> List[Record]:
        """Run the SQL part: base select plus leading pushdown stages."""
        statement = select(self.model)
        if where is not None:
            statement = statement.where(where)
        for stage in self.stages[:self._pushdown_count]:
            statement = stage.compile(statement, self.model)

        result = await db.execute(statement)
        return [to_record(instance) for instance in result.scalars().all()]

    async def shape(self, records: List[Record], db: AsyncSession) -> List[Record]:
        """Run the remaining stages in memory."""
        for stage in self.stages[self._pushdown_count:]:
            records = await stage.apply(records, db)
        return records
