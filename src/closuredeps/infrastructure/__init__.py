"""Infrastructure layer: filesystem scanning and the project workspace.

This layer reads source trees from disk and assembles the domain graph.
It must never import from services, commands, or output.
"""
