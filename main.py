import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

import config
from form_page import CONTACT_ENDPOINT, TEMPLATES_DIR, page_context
from notifier import Notifier, get_notifier
from schemas import validate

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "お問い合わせありがとうございます。正常に送信されました。"
INVALID_INPUT_MESSAGE = "入力内容に誤りがあります。"
SERVER_ERROR_MESSAGE = "サーバーエラーが発生しました。"

app = FastAPI(title="Contact Form Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@app.get("/")
def read_root():
    return {"message": "Contact form API is running"}


@app.get("/contact", response_class=HTMLResponse)
def contact_page(request: Request):
    """Render the contact form in its initial, empty state."""
    return templates.TemplateResponse(request, "contact.html", page_context())


@app.post(CONTACT_ENDPOINT)
async def submit_contact(request: Request, notifier: Notifier = Depends(get_notifier)):
    """Re-validate a submission from the contact form and hand it to the notifier.

    Client-side validation is never trusted. Malformed JSON and any other
    unexpected failure are logged and reported as a generic 500.
    """
    try:
        body = await request.json()
        result = validate(body)
        if not result.ok:
            return JSONResponse(
                status_code=400,
                content={"message": INVALID_INPUT_MESSAGE, "errors": result.errors},
            )
        notifier.notify(result.submission)
        return {"message": SUCCESS_MESSAGE}
    except Exception:
        logger.exception("Failed to process contact submission")
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
