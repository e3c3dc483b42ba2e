import uvicorn

if __name__ == "__main__":
    try:
        uvicorn.run(
            "equipment_service.app.main:app",
            host="0.0.0.0",
            port=8002,
            reload=True,
        )
    except KeyboardInterrupt:
        print("\nShutting down server...")
