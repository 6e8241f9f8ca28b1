import argparse
import json
import logging
import os
import sys
import tempfile

from core.config import AppConfig
from core.errors import ResumeBuilderError
from core.logging_config import configure_logging
from core.models import Account, ResumeFormState
from core.resume_store import FirestoreResumeStore, JsonFileResumeStore, init_firebase
from core.resume_workflow import ResumeWorkflow, export_filename


def load_form_state(file_path: str) -> ResumeFormState:
    """Reads a resume form (camelCase or snake_case JSON) from disk."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return ResumeFormState.model_validate(json.load(f))
    except FileNotFoundError:
        logging.error(f"File not found: {file_path}")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {file_path}")
        raise


def write_atomically(output_path: str, data: bytes):
    """Writes to a temp file next to `output_path`, then moves it into place."""
    directory = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(directory, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=directory, suffix=".part")
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(temp_path, output_path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise


def build_store(config: AppConfig):
    if config.store_backend == "json":
        return JsonFileResumeStore(config.store_path)
    init_firebase(config.firebase_credentials)
    return FirestoreResumeStore()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI Resume Studio CLI")
    parser.add_argument(
        "--store",
        choices=["json", "firestore"],
        help="Storage backend (defaults to RESUME_STORE, then 'firestore')."
    )
    parser.add_argument(
        "--store-path",
        help="Path of the JSON store file when --store=json."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    account = sub.add_parser("account", help="Create or update a local account (JSON store only).")
    account.add_argument("--user", required=True, help="Account id.")
    account.add_argument("--name", help="Display name.")
    account.add_argument("--email")
    account.add_argument("--industry", help="Industry used to tailor AI rewrites.")

    assemble = sub.add_parser("assemble", help="Print the markdown assembled from a form JSON file.")
    assemble.add_argument("--form", required=True, help="Path to the resume form JSON file.")
    assemble.add_argument("--name", help="Display name for the header.")

    save = sub.add_parser("save", help="Save a resume for a user.")
    save.add_argument("--user", required=True)
    source = save.add_mutually_exclusive_group(required=True)
    source.add_argument("--form", help="Assemble this form JSON file and save the result.")
    source.add_argument("--markdown", help="Save this markdown file as-is.")
    save.add_argument("--name", help="Display name for the header when assembling.")

    load = sub.add_parser("load", help="Print a user's saved resume.")
    load.add_argument("--user", required=True)

    improve = sub.add_parser("improve", help="Rewrite a piece of resume text with Gemini.")
    improve.add_argument("--user", required=True)
    improve.add_argument("--type", required=True, help="summary, skills, experience, education or project.")
    improve.add_argument("--text", required=True, help="The text to improve.")

    export = sub.add_parser("export", help="Render a form JSON file to PDF or DOCX.")
    export.add_argument("--form", required=True)
    export.add_argument("--name", help="Display name for the header.")
    export.add_argument("--format", choices=["pdf", "docx"], default="pdf")
    export.add_argument("--output-dir", default="output", help="Directory to save the generated file.")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    return parser


def run(args, config: AppConfig) -> int:
    if args.command == "serve":
        import uvicorn
        uvicorn.run("backend.handler:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command in ("assemble", "export"):
        workflow = ResumeWorkflow(store=None, config=config)
        form_state = load_form_state(args.form)
        if args.command == "assemble":
            print(workflow.assemble(form_state, args.name))
            return 0
        artifact = workflow.export(form_state, args.name, args.format)
        output_path = os.path.join(args.output_dir, export_filename(args.name, args.format))
        write_atomically(output_path, artifact)
        logging.info(f"Successfully created resume at {output_path}")
        return 0

    store = build_store(config)
    workflow = ResumeWorkflow(store, config)

    if args.command == "account":
        if not isinstance(store, JsonFileResumeStore):
            logging.error("Accounts can only be created locally with --store json.")
            return 1
        store.save_account(Account(id=args.user, name=args.name, email=args.email, industry=args.industry))
        return 0

    if args.command == "save":
        if args.form:
            content = workflow.assemble(load_form_state(args.form), args.name)
        else:
            with open(args.markdown, 'r', encoding='utf-8') as f:
                content = f.read()
        document = workflow.save(args.user, content)
        logging.info(f"Resume saved for {document.owner_id} at {document.updated_at.isoformat()}")
        return 0

    if args.command == "load":
        document = workflow.load(args.user)
        if document is None:
            logging.warning(f"No resume found for {args.user}")
            return 1
        print(document.content)
        return 0

    if args.command == "improve":
        print(workflow.rewrite_field(args.user, args.text, args.type))
        return 0

    return 1


def main(argv=None) -> int:
    """
    Entry point for the resume builder CLI.
    """
    args = build_parser().parse_args(argv)
    config = AppConfig.from_env()
    overrides = {}
    if args.store:
        overrides["store_backend"] = args.store
    if args.store_path:
        overrides["store_path"] = args.store_path
    config = config.model_copy(update=overrides)
    configure_logging(config.log_level)

    try:
        return run(args, config)
    except ResumeBuilderError as e:
        logging.error(f"{e.error_code}: {e.message}")
        return 2
    except (OSError, ValueError) as e:
        logging.error(f"{type(e).__name__}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
