"""TaskFlow: task board state synchronized with a hosted record service."""
