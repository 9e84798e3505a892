from __future__ import annotations

from typing import Any, List

import pytest
from sqlalchemy import Column, Float, Integer, MetaData, String, Table, create_engine
from sqlalchemy.orm import Session

from rowgraph import RowController, RowEdgeSchema, RowVertexSchema, SchemaSet


metadata = MetaData()

people = Table(
    "people",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=True),
    Column("age", Integer, nullable=True),
)

people_archive = Table(
    "people_archive",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=True),
    Column("age", Integer, nullable=True),
)

cities = Table(
    "cities",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=True),
)

software = Table(
    "software",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=True),
    Column("lang", String, nullable=True),
)

knows = Table(
    "knows",
    metadata,
    Column("id", String, primary_key=True),
    Column("out_id", String, nullable=False),
    Column("in_id", String, nullable=False),
    Column("since", Integer, nullable=True),
)

created = Table(
    "created",
    metadata,
    Column("id", String, primary_key=True),
    Column("out_id", String, nullable=False),
    Column("in_id", String, nullable=False),
    Column("weight", Float, nullable=True),
)


def build_schema_set() -> SchemaSet:
    return SchemaSet(
        [
            RowVertexSchema("people", "person", properties={"name": "name", "age": "age"}),
            RowVertexSchema("people_archive", "person", properties={"name": "name", "age": "age"}),
            RowVertexSchema("software", "software", properties={"name": "name", "lang": "lang"}),
            RowEdgeSchema(
                "knows",
                "knows",
                properties={"since": "since"},
                out_vertex_label="person",
                in_vertex_label="person",
            ),
            RowEdgeSchema(
                "created",
                "created",
                properties={"weight": "weight"},
                out_vertex_label="person",
                in_vertex_label="software",
            ),
        ]
    )


class CountingSession:
    """
    Wraps a real Session and records every executed statement, so tests can
    assert that a code path never touched storage.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self.statements: List[Any] = []

    def execute(self, statement: Any, *args: Any, **kwargs: Any) -> Any:
        self.statements.append(statement)
        return self._session.execute(statement, *args, **kwargs)

    def get_bind(self) -> Any:
        return self._session.get_bind()

    @property
    def calls(self) -> int:
        return len(self.statements)


@pytest.fixture
def engine():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def counting_session(session) -> CountingSession:
    return CountingSession(session)


@pytest.fixture
def schema_set() -> SchemaSet:
    return build_schema_set()


@pytest.fixture
def controller(counting_session, schema_set) -> RowController:
    return RowController(counting_session, schema_set)


@pytest.fixture
def populated(session):
    """
    Two people in `people`, one of them duplicated in `people_archive`,
    one archived-only person, two software vertices and a few edges.
    """
    session.execute(
        people.insert(),
        [
            {"id": "marko", "name": "marko", "age": 29},
            {"id": "vadas", "name": "vadas", "age": 27},
        ],
    )
    session.execute(
        people_archive.insert(),
        [
            {"id": "marko", "name": "marko", "age": 29},
            {"id": "peter", "name": "peter", "age": 35},
        ],
    )
    session.execute(
        software.insert(),
        [
            {"id": "lop", "name": "lop", "lang": "java"},
            {"id": "ripple", "name": "ripple", "lang": "java"},
        ],
    )
    session.execute(
        knows.insert(),
        [
            {"id": "k1", "out_id": "marko", "in_id": "vadas", "since": 2010},
            {"id": "k2", "out_id": "peter", "in_id": "marko", "since": 2015},
        ],
    )
    session.execute(
        created.insert(),
        [
            {"id": "c1", "out_id": "marko", "in_id": "lop", "weight": 0.4},
            {"id": "c2", "out_id": "peter", "in_id": "ripple", "weight": 1.0},
        ],
    )
    return session
