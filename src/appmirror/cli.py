# AppMirror — CLI (Typer)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import typer
from typing import Any, Optional
from rich import print

from .config import Settings
from .core.catalog import Catalog
from .core.session import TransportError
from .logging_config import configure_logging
from .utils.io import append_jsonl, ensure_parent_dir
from .utils.urls import extract_slug_and_package

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _catalog(
	source_domain: Optional[str] = None,
	user_domain: Optional[str] = None,
	log_level: Optional[str] = None,
	quiet: bool = False,
) -> Catalog:
	cfg = Settings()
	overrides = {}
	if source_domain:
		overrides["source_domain"] = source_domain
	if user_domain:
		overrides["user_domain"] = user_domain
	if overrides:
		cfg = cfg.model_copy(update=overrides)
	configure_logging(level=log_level or cfg.log_level, log_dir=cfg.log_dir, console=not quiet)
	return Catalog(cfg)


def _emit(record: Any, jsonl: Optional[str]) -> None:
	data = record.model_dump(mode="json") if hasattr(record, "model_dump") else record
	print(data)
	if jsonl:
		ensure_parent_dir(jsonl)
		append_jsonl(jsonl, data)


SourceOpt = typer.Option(None, help="Source catalog domain (overrides env)")
UserOpt = typer.Option(None, help="Domain the mirror is served under (overrides env)")
LevelOpt = typer.Option(None, help="Log level")
QuietOpt = typer.Option(False, "--quiet", help="Log to file only")
JsonlOpt = typer.Option(None, help="Append the result to this JSON-lines file")


@app.command("app")
def app_cmd(
	path: str = typer.Argument(..., help="App path or URL, e.g. /some-app/com.example.app"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""Scrape one app's detail page, its latest variant and previous versions."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).app_page(path), jsonl)


@app.command()
def download(
	path: str = typer.Argument(..., help="App path or URL"),
	sha1: str = typer.Option("", help="Pin a specific variant by SHA1"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""Resolve the download view (latest, or a specific SHA1)."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).download_page(path, sha1=sha1), jsonl)


@app.command()
def proxy(
	app_id: str = typer.Argument(..., help="slug/package as used by the proxy link"),
	file: str = typer.Argument(..., help="File name to suggest to the CDN"),
	sha1: str = typer.Option("", help="Pin a specific variant by SHA1"),
	source_domain: Optional[str] = SourceOpt,
	log_level: Optional[str] = LevelOpt,
):
	"""Print the final binary URL the download proxy would redirect to."""
	result = _catalog(source_domain, None, log_level).proxy_download(app_id, file, sha1=sha1)
	if isinstance(result, TransportError):
		print(f"[red]{result.message}[/red]")
		raise typer.Exit(code=1)
	print(result)


@app.command()
def category(
	main: str = typer.Argument(..., help="apps, games or a main category"),
	sub: str = typer.Argument("", help="Sub category"),
	page: int = typer.Option(1, min=1, help="Page number"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""List apps in a category."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).category(main, sub, page=page), jsonl)


@app.command()
def hot(
	kind: str = typer.Argument("apps", help="apps or games"),
	limit: Optional[int] = typer.Option(None, help="Maximum items (overrides env)"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""List hot apps or games."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).hot(kind, limit=limit), jsonl)


@app.command()
def latest(
	kind: str = typer.Argument("apps", help="apps or games"),
	page: int = typer.Option(1, min=1, help="Page number"),
	limit: Optional[int] = typer.Option(None, help="Maximum items"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""List newly added apps or games."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).latest(kind, page=page, limit=limit), jsonl)


@app.command()
def developer(
	name: str = typer.Argument(..., help="Developer name or slug"),
	page: int = typer.Option(1, min=1, help="Page number"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""List a developer's apps."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).developer(name, page=page), jsonl)


@app.command()
def search(
	keyword: str = typer.Argument(..., help="Search keyword"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""Search the catalog."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).search(keyword), jsonl)


@app.command()
def suggest(
	keyword: str = typer.Argument(..., help="Partial keyword"),
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
):
	"""Autocomplete suggestions for a keyword."""
	print(_catalog(source_domain, user_domain, log_level, quiet).suggest(keyword))


@app.command()
def categories(
	source_domain: Optional[str] = SourceOpt,
	user_domain: Optional[str] = UserOpt,
	log_level: Optional[str] = LevelOpt,
	quiet: bool = QuietOpt,
	jsonl: Optional[str] = JsonlOpt,
):
	"""Print the app and game category menu."""
	_emit(_catalog(source_domain, user_domain, log_level, quiet).categories(), jsonl)


@app.command("resolve-id")
def resolve_id(value: str = typer.Argument(..., help="Path or URL to resolve")):
	"""Show the (slug, package_name) pair extracted from a path or URL."""
	ident = extract_slug_and_package(value)
	print({"slug": ident.slug, "package_name": ident.package_name})


@app.command("print-config")
def print_config():
	"""Print effective configuration from environment."""
	cfg = Settings()
	print(cfg.model_dump())


def main():
	app()


if __name__ == "__main__":
	main()
