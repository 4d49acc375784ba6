"""Ruby Language Server.

A language server for Ruby source files that speaks the Language Server Protocol
over stdio, publishing `ruby -wc` diagnostics and serving code completion.
"""

__version__ = "0.1.0"
