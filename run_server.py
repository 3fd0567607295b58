import logging
import sys

import uvicorn
from dotenv import load_dotenv

if __name__ == "__main__":
    load_dotenv()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    print("Starting Feedback Lens API Server...")
    print("Docs available at: http://localhost:8000/docs")

    uvicorn.run(
        "backend.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
