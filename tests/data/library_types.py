"""Library catalogue declared with schemaforge decorators, imported by the CLI tests."""

from enum import Enum

from schemaforge.decorators import arg, field, interface_type, object_type
from schemaforge.scalars import ID


class Genre(Enum):
    FICTION = "fiction"
    SCIENCE = "science"


@interface_type(description="Anything that can be borrowed")
class Item:
    id = field(ID)
    title = field(str)


@object_type(implements=[Item])
class Book:
    page_count = field(int)
    genre = field(Genre)


@object_type(implements=[Item])
class Magazine:
    issue = field(int)


@object_type()
class Query:
    items = field(lambda: [Item], args=[arg("genre", Genre, nullable=True)])
    book_count = field(int)


@object_type()
class Mutation:
    borrow = field(lambda: Item, nullable=True, args=[arg("id", ID)])
