"""
SQLAlchemy bindings: the class metadata registry, a ``select()``-based query
builder, the search and order filters, and a deserializer for mapped classes.

Synopsis
--------

.. code-block:: python

   registry = SQLAManagerRegistry([Book, Author])
   qb = SQLAQueryBuilder(Book)
   statement = apply_filters(
       qb,
       [SearchFilter(registry, {"title": "ipartial", "author.name": "exact"})],
       "Book",
       request,
   )
   books = session.scalars(statement).all()

"""
from .core import SQLAClassMetadata, SQLAManagerRegistry  # noqa: F401
from .deserializer import SQLADeserializer  # noqa: F401
from .filters import OrderFilter, SearchFilter  # noqa: F401
from .querying import SQLAQueryBuilder, apply_filters  # noqa: F401
