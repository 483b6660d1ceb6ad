import uvicorn


def main():
    uvicorn.run(
        "cafeteria_pos.main:app",
        host="0.0.0.0",
        port=3000,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
