import os
from dotenv import load_dotenv

# Load environment variables before the config is read
load_dotenv()

from origin import create_app

app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 3000))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get("FLASK_DEBUG") == "1", use_reloader=False)
