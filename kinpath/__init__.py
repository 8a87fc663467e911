"""Family relationship resolution over a KuzuDB / SQL family graph."""
