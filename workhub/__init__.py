"""WorkHub: task workflow, approvals and real-time notifications."""
