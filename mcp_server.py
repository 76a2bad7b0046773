from fastmcp import FastMCP

mcp = FastMCP("figma-theme")


def main():
    # tools register themselves on import
    import figma_tools  # noqa: F401

    mcp.run()
