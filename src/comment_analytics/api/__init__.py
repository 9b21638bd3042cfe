"""HTTP API: schemas and routers"""
