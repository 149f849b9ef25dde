"""specport -- Convert RAML and OpenAPI 3.x descriptions into request collections.

This package reads an API description (RAML 0.8/1.0 or OpenAPI 3.x, as YAML
or JSON), walks its resources or operations, and produces a normalized
*collection*: a tree of folders and HTTP requests with URLs, headers, query
parameters, URI variables, bodies and authentication placeholders filled in.

Typical usage::

    from specport import import_collection

    collection = import_collection("petstore.yaml")
    data = collection.to_dict()

or from the shell::

    specport convert petstore.yaml -o petstore.json

Modules:
    assembler: Public import entry points and collection assembly.
    adapters: One converter per source format (RAML, OpenAPI).
    parser: Document loading, ``$ref`` resolution and schema scaffolding.
    builder: Item builders shared by the adapters.
    pipeline: Post-processing stages applied to every collection.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and settings precedence.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"

from specport.assembler import import_collection, import_collection_async  # noqa: E402

__all__ = ["__version__", "import_collection", "import_collection_async"]
