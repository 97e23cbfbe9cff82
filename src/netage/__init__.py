"""netage -- Netage publishing profile for HTML specification documents.

This package takes an HTML specification document and runs it through an
ordered pipeline of plugins that inject the Netage stylesheet, resource
hints, logos and non-normative annotations, then lints the result against
the Netage style guide. A build command packages a profile into a single
distributable archive.

Typical workflow::

    netage process draft.html -o published.html
    netage build netage

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and profile management.
    pubsub: Named-event hub used for lifecycle and diagnostic events.
    pipeline: One-call document processing.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
