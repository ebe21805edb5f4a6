import json
import logging
from typing import Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import MailerConfig, get_config
from .csv_processor import parse_roster
from .email_sender import ATTACHMENT_FILENAME, SMTPTransport, dispatch_job
from .exceptions import JobNotFoundError, OfferMailerError
from .jobs import JobStore, get_job_store
from .letter_generator import generate_letters
from .utils import calculate_file_size_mb, format_error_message

# Configure logging
logger = logging.getLogger(__name__)


def get_mail_transport(config: MailerConfig = Depends(get_config)) -> SMTPTransport:
    """FastAPI dependency for the outbound mail transport"""
    return SMTPTransport(config)


def error_response(status_code: int, error: str, exc: Exception, config: MailerConfig, expose: bool = False) -> JSONResponse:
    """Collapse a failure into the API's JSON error shape"""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": format_error_message(exc, expose or config.is_development),
        },
    )


app = FastAPI(
    title="Offer Letter Mailer",
    description="Generate personalized offer letter PDFs from a CSV roster and email each candidate their letter",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware to handle cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # The submission UI is served from a different origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint with basic information"""
    return {
        "message": "Welcome to the Offer Letter Mailer API",
        "version": __version__,
        "workflow": [
            "POST a CSV roster to /api/generate-letters and keep the returned job_id",
            "POST {\"job_id\": ...} to /api/send-emails to email every generated letter"
        ],
        "csv_columns": {
            "expected": ["name", "position", "start_date", "email"],
            "optional": ["coordinator", "coordinator_contact", "location"]
        },
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "generate_letters": "/api/generate-letters",
            "send_emails": "/api/send-emails",
            "job": "/api/jobs/{job_id}",
            "letter_preview": "/api/jobs/{job_id}/letters/{index}"
        }
    }


@app.get("/health")
async def health_check(config: MailerConfig = Depends(get_config), store: JobStore = Depends(get_job_store)):
    """Health check endpoint to verify service is running"""
    smtp_valid, smtp_error = config.validate_config()

    return {
        "status": "healthy",
        "message": "Offer Letter Mailer is running",
        "version": __version__,
        "config": config.summary(),
        "capabilities": {
            "smtp": "configured" if smtp_valid else f"not configured: {smtp_error}",
            "active_jobs": len(store)
        }
    }


@app.post("/api/generate-letters")
async def generate_offer_letters(
    file: Optional[UploadFile] = File(None, description="CSV roster with columns name, position, start_date, email and optional coordinator, coordinator_contact, location"),
    config: MailerConfig = Depends(get_config),
    store: JobStore = Depends(get_job_store)
):
    """
    Generate one offer letter PDF per CSV row and hold them for dispatch

    - **file**: CSV roster. Header names are case-insensitive and may appear in any order.
      Rows whose field count differs from the header are skipped.

    The whole batch is discarded if any row fails. PDF bytes stay on the server;
    only the row metadata and the job id are returned.
    """
    if file is None:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Please upload a CSV file", "message": "No file uploaded"},
        )

    if not file.filename or not file.filename.lower().endswith('.csv'):
        await file.close()
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Please upload a CSV file", "message": "File must be a CSV"},
        )

    try:
        contents = await file.read()
        logger.info(f"Received roster {file.filename} ({calculate_file_size_mb(contents)} MB)")

        rows = parse_roster(contents, config.max_csv_rows)
        letters = await run_in_threadpool(generate_letters, rows, config)
        job = store.create_job(letters, filename=file.filename)

        return {
            "success": True,
            "job_id": job.job_id,
            "files": [letter.to_metadata() for letter in job.letters]
        }

    except Exception as e:
        logger.exception(f"Error generating letters: {e}")
        return error_response(500, "Failed to generate offer letters", e, config)
    finally:
        await file.close()


@app.post("/api/send-emails")
async def send_offer_emails(
    request: Request,
    job_id: Optional[str] = Query(None, description="Job to dispatch. Overrides any job_id in the body."),
    config: MailerConfig = Depends(get_config),
    store: JobStore = Depends(get_job_store),
    transport: SMTPTransport = Depends(get_mail_transport)
):
    """
    Email every letter of a generated job, one message per candidate

    The body is optional: `{"job_id": "..."}` selects the job, any other keys
    (such as the `files` list echoed by older clients) are ignored. Without a
    job id the most recently generated job is sent.

    Sending stops at the first failure and no partial count is reported.
    Calling this twice sends the same letters twice.
    """
    if job_id is None:
        job_id = await _job_id_from_body(request)

    try:
        if job_id:
            job = store.get_job(job_id)
        else:
            job = store.get_latest_job()

        if job is None:
            return {"success": True, "sent": 0, "message": "Successfully sent 0 emails"}

        sent = await run_in_threadpool(dispatch_job, job, transport, config)
        store.record_dispatch(job)

        return {
            "success": True,
            "job_id": job.job_id,
            "sent": sent,
            "message": f"Successfully sent {sent} emails"
        }

    except JobNotFoundError as e:
        return error_response(404, "Job not found", e, config, expose=True)
    except Exception as e:
        logger.exception(f"Error sending emails: {e}")
        return error_response(500, "Failed to send emails", e, config)


async def _job_id_from_body(request: Request) -> Optional[str]:
    body = await request.body()
    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        logger.debug("Ignoring non-JSON send-emails body")
        return None
    if isinstance(payload, dict) and payload.get('job_id'):
        return str(payload['job_id'])
    return None


@app.get("/api/jobs/{job_id}")
async def get_job_details(job_id: str, config: MailerConfig = Depends(get_config), store: JobStore = Depends(get_job_store)):
    """Get metadata about a generated job"""
    try:
        job = store.get_job(job_id)
    except OfferMailerError as e:
        return error_response(404, "Job not found", e, config, expose=True)

    return {"success": True, "job": job.summary()}


@app.get("/api/jobs/{job_id}/letters/{index}")
async def preview_letter(job_id: str, index: int, config: MailerConfig = Depends(get_config), store: JobStore = Depends(get_job_store)):
    """Stream one generated letter PDF for previewing in the browser"""
    try:
        job = store.get_job(job_id)
    except OfferMailerError as e:
        return error_response(404, "Job not found", e, config, expose=True)

    if index < 0 or index >= len(job.letters):
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "Letter not found",
                "message": f"Job {job_id} has {len(job.letters)} letters"
            },
        )

    return Response(
        content=job.letters[index].pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"inline; filename={ATTACHMENT_FILENAME}",
            "X-Job-ID": job_id,
            "Cache-Control": "no-cache, no-store, must-revalidate"
        }
    )


# Production runner
if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = get_config()
    reload = config.is_development

    print(f"Starting Offer Letter Mailer on {config.host}:{config.port}")
    print(f"Configuration: Company={config.company_name}, Max rows={config.max_csv_rows}, Job TTL={config.job_ttl_seconds}s")

    # The job store lives in process memory, so a single worker is required
    uvicorn.run(
        "offer_mailer.main:app",
        host=config.host,
        port=config.port,
        workers=1,
        reload=reload,
        access_log=True,
        log_level="info"
    )
