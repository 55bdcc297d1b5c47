"""Application services: orchestration over repositories, ports and policies."""
