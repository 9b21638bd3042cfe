"""Infrastructure layer: collaborator clients"""
