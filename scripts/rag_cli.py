import argparse
import json
import sys

from doc_rag.errors import RagError
from doc_rag.io_utils import load_chunks, save_chunks
from doc_rag.logging_utils import configure_logging
from doc_rag.pipeline import RagService
from doc_rag.settings import load_settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest documents and ask questions about them.")
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="chunk, embed and store one or more files")
    ingest.add_argument("files", nargs="+")

    ask = commands.add_parser("ask", help="answer a question from the stored corpus")
    ask.add_argument("question")

    export = commands.add_parser("export", help="write every stored chunk to a JSONL file")
    export.add_argument("path")

    restore = commands.add_parser("import", help="append chunks from a JSONL export")
    restore.add_argument("path")

    commands.add_parser("reset", help="drop every stored chunk (chroma backend only)")

    args = parser.parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    service = RagService.from_settings(settings)

    try:
        if args.command == "ingest":
            payload = service.ingest_files(args.files).to_payload()
        elif args.command == "ask":
            payload = service.query(args.question).to_payload()
        elif args.command == "export":
            chunks = service.store.fetch_all()
            save_chunks(chunks, args.path)
            payload = {"exported": len(chunks), "path": args.path}
        elif args.command == "import":
            chunks = load_chunks(args.path)
            service.store.append(chunks)
            payload = {"imported": len(chunks), "totalStoredChunks": service.store.count()}
        else:
            if not hasattr(service.store, "reset"):
                print("reset is only supported by the chroma backend", file=sys.stderr)
                return 1
            service.store.reset()
            payload = {"totalStoredChunks": service.store.count()}
    except RagError as exc:
        print(json.dumps({"error": type(exc).__name__, "message": str(exc)}), file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
