from arena.app import create_app

# uvicorn arena.main:app
app = create_app()
