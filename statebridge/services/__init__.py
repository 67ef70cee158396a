"""Entity services exposed over HTTP."""
