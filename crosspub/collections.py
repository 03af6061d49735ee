from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .document import Document, DocumentKind


class DocumentCollection(Sequence[Document]):
    """Lightweight helper for ordering and filtering Documents."""

    def __init__(self, documents: Iterable[Document]):
        self._documents = list(documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __getitem__(self, item):
        return self._documents[item]

    def of_kind(self, kind: DocumentKind) -> DocumentCollection:
        return DocumentCollection(d for d in self._documents if d.kind is kind)

    def posts(self) -> DocumentCollection:
        """Posts, newest first.

        Posts sharing a date are ordered by slug, ascending, so output is
        deterministic.

        Returns:
            A new DocumentCollection of sorted posts.
        """
        posts = sorted(self.of_kind(DocumentKind.POST), key=lambda d: d.slug)
        # stable sort keeps the slug order within a date
        posts.sort(key=lambda d: d.date, reverse=True)
        return DocumentCollection(posts)

    def topics(self) -> DocumentCollection:
        """Topics ordered by slug, ascending."""
        return DocumentCollection(
            sorted(self.of_kind(DocumentKind.TOPIC), key=lambda d: d.slug)
        )

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"DocumentCollection({len(self._documents)} documents)"
