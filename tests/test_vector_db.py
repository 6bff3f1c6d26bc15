from ai_apps.rag.vector_db import DocumentChunk, InMemoryDocumentStore, TextChunker


def _sample_text(words: int = 700) -> str:
    # Unique tokens so every chunk has exactly one position in the text
    return " ".join(f"token{index:04d}" for index in range(words))


def _chunk(filename: str, text: str, vector: tuple) -> DocumentChunk:
    return DocumentChunk(source_filename=filename, text=text, embedding=vector)


def test_chunker_respects_size_and_overlap() -> None:
    text = _sample_text()
    chunks = TextChunker(chunk_size=1000, chunk_overlap=200).chunk_text(text)

    assert len(chunks) > 1
    assert all(len(chunk) <= 1000 for chunk in chunks)

    starts = [text.index(chunk) for chunk in chunks]
    for previous_start, previous_chunk, start in zip(starts, chunks, starts[1:]):
        overlap = previous_start + len(previous_chunk) - start
        assert 0 < overlap <= 200


def test_chunks_reconstruct_the_original_text() -> None:
    text = _sample_text()
    chunks = TextChunker(chunk_size=1000, chunk_overlap=200).chunk_text(text)

    rebuilt = ""
    for chunk in chunks:
        start = text.index(chunk)
        # Drop the part already covered by the previous chunk
        rebuilt += text[len(rebuilt):start] + chunk[max(0, len(rebuilt) - start):]

    assert rebuilt == text


def test_short_text_is_a_single_chunk() -> None:
    chunks = TextChunker(chunk_size=1000, chunk_overlap=200).chunk_text("A short note.")
    assert chunks == ["A short note."]


def test_document_count_tracks_files_not_chunks() -> None:
    store = InMemoryDocumentStore()
    assert store.is_empty
    assert store.document_count == 0

    store.append([_chunk("a.txt", "one", (1.0, 0.0)), _chunk("a.txt", "two", (0.0, 1.0))])
    store.append([_chunk("b.txt", "three", (1.0, 1.0))])

    assert store.document_count == 2
    assert store.chunk_count == 3

    store.clear()

    assert store.document_count == 0
    assert store.chunk_count == 0
    assert store.is_empty


def test_query_top_k_orders_by_cosine_similarity() -> None:
    store = InMemoryDocumentStore()
    store.append(
        [
            _chunk("a.txt", "orthogonal", (0.0, 1.0)),
            _chunk("a.txt", "close", (1.0, 0.2)),
            _chunk("a.txt", "exact", (2.0, 0.0)),
            _chunk("a.txt", "opposite", (-1.0, 0.0)),
        ]
    )

    hits = store.query_top_k((1.0, 0.0), k=3)

    assert [hit.chunk.text for hit in hits] == ["exact", "close", "orthogonal"]
    assert hits[0].score == 1.0


def test_query_top_k_breaks_ties_by_insertion_order() -> None:
    store = InMemoryDocumentStore()
    store.append([_chunk("first.txt", f"first-{i}", (1.0, 0.0)) for i in range(3)])
    store.append([_chunk("second.txt", f"second-{i}", (1.0, 0.0)) for i in range(3)])

    hits = store.query_top_k((3.0, 0.0), k=4)

    assert [hit.chunk.text for hit in hits] == ["first-0", "first-1", "first-2", "second-0"]


def test_query_top_k_with_fewer_chunks_than_k() -> None:
    store = InMemoryDocumentStore()
    store.append([_chunk("a.txt", "only", (1.0,))])

    assert len(store.query_top_k((1.0,), k=4)) == 1
