import uvicorn

from rental_api.core.app_factory import create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run("rental_api.main:app", host="0.0.0.0", port=8000)
