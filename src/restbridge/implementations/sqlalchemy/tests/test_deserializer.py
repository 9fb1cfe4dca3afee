import datetime
import decimal
import json

import pytest
import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ....exceptions import (
    DeserializationError,
    InvalidArgumentError,
    UnsupportedFormatError,
)
from ....listeners import OBJECT_TO_POPULATE, DeserializeListener
from ....models import Request, RequestAttributes
from ....serializer import SerializerContextBuilder
from ..core import SQLAManagerRegistry
from .testing import Author, Base, Book, Review, populate


@pytest.fixture
def session():
    engine = sa.create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with orm.Session(engine) as session:
        populate(session)
        yield session


@pytest.fixture
def target():
    from ..deserializer import SQLADeserializer

    return SQLADeserializer


@pytest.fixture
def registry():
    return SQLAManagerRegistry([Base])


class TestSQLADeserializer:
    def test_create(self, target, registry):
        book = target(registry).deserialize(
            b'{"title": "New", "pages": 10, "price": 9.5, "published_on": "2017-01-02"}',
            "Book",
            "json",
            {},
        )
        assert isinstance(book, Book)
        assert book.id is None
        assert book.title == "New"
        assert book.pages == 10
        assert book.price == decimal.Decimal("9.5")
        assert book.published_on == datetime.date(2017, 1, 2)

    def test_populate(self, target, registry, session):
        book = session.get(Book, 1)
        result = target(registry).deserialize(
            '{"title": "Renamed"}', "Book", "json", {OBJECT_TO_POPULATE: book}
        )
        assert result is book
        assert book.title == "Renamed"
        assert book.pages == 320

    def test_jsonld_keywords(self, target, registry):
        book = target(registry).deserialize(
            '{"@context": "/contexts/Book", "@type": "Book", "title": "LD"}', "Book", "jsonld", {}
        )
        assert book.title == "LD"

    def test_associations(self, target, registry, session):
        deserializer = target(registry, session)
        book = deserializer.deserialize('{"title": "T", "author": 2}', "Book", "json", {})
        assert book.author is session.get(Author, 2)
        author = deserializer.deserialize('{"name": "A", "publisher": null}', "Author", "json", {})
        assert author.publisher is None

    def test_collection_association(self, target, registry, session):
        review = Review(rating=5, book_id=1)
        session.add(review)
        session.flush()
        book = target(registry, session).deserialize(
            json.dumps({"title": "T", "reviews": [review.id]}), "Book", "json", {}
        )
        assert book.reviews == [review]

    def test_errors_are_collected(self, target, registry, session):
        book = session.get(Book, 1)
        with pytest.raises(DeserializationError) as e:
            target(registry).deserialize(
                '{"id": 5, "title": null, "pages": "many", "isbn": "x", "author": 1}',
                "Book",
                "json",
                {OBJECT_TO_POPULATE: book},
            )
        assert sorted(item.path for item in e.value.errors) == [
            "/author",
            "/id",
            "/isbn",
            "/pages",
            "/title",
        ]
        assert book.id == 1
        assert book.title == "The Web Platform"

    def test_unknown_related(self, target, registry, session):
        with pytest.raises(DeserializationError) as e:
            target(registry, session).deserialize('{"author": 42}', "Book", "json", {})
        assert e.value.errors[0].path == "/author"

    def test_bool_is_not_an_integer(self, target, registry):
        with pytest.raises(DeserializationError):
            target(registry).deserialize('{"pages": true}', "Book", "json", {})

    def test_boolean_field(self, target, registry, session):
        book = session.get(Book, 1)
        target(registry).deserialize(
            '{"available": false}', "Book", "json", {OBJECT_TO_POPULATE: book}
        )
        session.flush()
        statement = sa.select(Book.id).where(sa.not_(Book.available)).order_by(Book.id)
        assert session.scalars(statement).all() == [1, 2]
        book = target(registry).deserialize('{"available": null}', "Book", "json", {})
        assert book.available is None

    @pytest.mark.parametrize("value", ["1", '"true"', "0"])
    def test_boolean_field_rejects_other_types(self, target, registry, value):
        with pytest.raises(DeserializationError) as e:
            target(registry).deserialize(f'{{"available": {value}}}', "Book", "json", {})
        assert e.value.errors[0].path == "/available"

    @pytest.mark.parametrize("body", ["{", b"\xff", "[1, 2]", '"book"'])
    def test_malformed(self, target, registry, body):
        with pytest.raises(DeserializationError):
            target(registry).deserialize(body, "Book", "json", {})

    def test_unsupported_format(self, target, registry):
        with pytest.raises(UnsupportedFormatError) as e:
            target(registry).deserialize("<book/>", "Book", "xml", {})
        assert e.value.format == "xml"

    def test_unknown_resource_class(self, target, registry):
        with pytest.raises(DeserializationError):
            target(registry).deserialize("{}", "Magazine", "json", {})

    def test_object_to_populate_of_another_class(self, target, registry, session):
        with pytest.raises(InvalidArgumentError):
            target(registry).deserialize(
                "{}", "Book", "json", {OBJECT_TO_POPULATE: session.get(Author, 1)}
            )


def test_listener(target, registry, session):
    listener = DeserializeListener(
        target(registry, session),
        SerializerContextBuilder(),
        {"jsonld": ["application/ld+json"], "json": ["application/json"]},
    )
    book = session.get(Book, 2)
    request = Request(
        method="PUT",
        uri="/books/2",
        content_type="application/json",
        content=b'{"title": "Hypermedia Done Better", "author": 1}',
        attributes=RequestAttributes(
            resource_class="Book", item_operation_name="put", existing_object=book
        ),
    )
    listener.on_request(request)
    assert request.attributes.result is book
    assert book.title == "Hypermedia Done Better"
    assert book.author is session.get(Author, 1)
