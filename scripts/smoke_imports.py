from doc_rag.chunking import split_text
from doc_rag.embeddings import cosine_similarity
from doc_rag.qa import assemble_prompt
from doc_rag.retrieval import retrieve
from doc_rag.schema import Chunk
from doc_rag.settings import BASIC_PRESET, STRICT_PRESET


if __name__ == "__main__":
    text = "Renewal happens every twelve months unless either party gives notice. " * 20
    corpus = [
        Chunk(text=chunk, source_id="sample.txt", embedding=[1.0, float(i)])
        for i, chunk in enumerate(split_text(text, BASIC_PRESET.chunk_size, BASIC_PRESET.overlap))
    ]
    result = retrieve([1.0, 0.0], corpus, top_k=BASIC_PRESET.top_k, min_score=BASIC_PRESET.min_score)
    print(
        {
            "basic_chunks": len(corpus),
            "strict_chunks": len(split_text(text, STRICT_PRESET.chunk_size, STRICT_PRESET.overlap)),
            "retrieved": len(result),
            "self_similarity": cosine_similarity([1.0, 2.0], [1.0, 2.0]),
            "prompt_chars": len(assemble_prompt("When does it renew?", result)),
        }
    )
