"""
Climate Data API Backend
========================

This is the Python package for the backend API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading / an account look like?)
- services/  = Repositories that talk to MongoDB
- routers/   = API endpoints (the doors into our app)
- utils/     = Small validation helpers
- config.py  = Settings from environment variables
- main.py    = Puts it all together and starts the server
"""
