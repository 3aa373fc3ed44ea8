"""
DCAP Quote Verifier

Verifies Intel TDX quotes with dcap-qvl, Intel's DCAP Quote Verification
Library command line tool. The tool reports its verdict only as text, so the
combined output is handed to the verdict classifier.
"""

import asyncio
import logging

from .base import BaseQuoteVerifier, VerdictClassifier
from .exceptions import QuoteFormatError
from .models import AttestationQuote, VerificationOutcome
from .scratch import ScratchSpace

logger = logging.getLogger(__name__)

QUOTE_FILENAME = "quote.bin"


class DcapQuoteVerifier(BaseQuoteVerifier):
    """
    Runs `dcap-qvl verify <quote.bin>` as a subprocess.

    The binary quote is staged in the caller's scratch space, so two
    verifications never share a file.
    """

    def __init__(
        self,
        binary: str = "dcap-qvl",
        timeout_seconds: float = 30.0,
        classifier: VerdictClassifier = None,
    ):
        """
        Initialize DCAP verifier.

        Args:
            binary: Path or name of the dcap-qvl executable
            timeout_seconds: Upper bound for one verification run
            classifier: Verdict strategy (defaults to the "Quote verified" marker)
        """
        super().__init__(classifier)
        self.binary = binary
        self.timeout_seconds = timeout_seconds
        logger.debug(f"Initialized DCAP verifier using '{self.binary}'")

    async def verify(
        self, quote: AttestationQuote, scratch: ScratchSpace
    ) -> VerificationOutcome:
        try:
            binary_quote = quote.to_binary()
        except QuoteFormatError as e:
            logger.warning(f"Rejecting malformed quote: {e}")
            return VerificationOutcome(verified=False, diagnostics=str(e))

        try:
            quote_path = scratch.file(QUOTE_FILENAME)
            quote_path.write_bytes(binary_quote.data)
            returncode, stdout, stderr = await self._run(str(quote_path))
        except asyncio.TimeoutError:
            error_msg = f"dcap-qvl timed out after {self.timeout_seconds}s"
            logger.warning(error_msg)
            return VerificationOutcome(verified=False, diagnostics=error_msg)
        except OSError as e:
            error_msg = f"Failed to run dcap-qvl: {e}"
            logger.error(error_msg)
            return VerificationOutcome(verified=False, diagnostics=error_msg)
        except Exception as e:
            error_msg = f"Verification error: {e}"
            logger.error(f"Unexpected DCAP verification error: {error_msg}", exc_info=True)
            return VerificationOutcome(verified=False, diagnostics=error_msg)

        if stdout:
            logger.debug(f"Verification output: {stdout}")
        if stderr:
            logger.debug(f"Verification messages: {stderr}")

        diagnostics = "\n".join(part for part in (stdout, stderr) if part)
        if returncode != 0:
            logger.warning(f"dcap-qvl exited with status {returncode}")
            return VerificationOutcome(
                verified=False,
                diagnostics=f"dcap-qvl exited with status {returncode}\n{diagnostics}".strip(),
            )

        return self.classify(diagnostics)

    async def _run(self, quote_path: str):
        """Run the verifier and return (returncode, stdout, stderr)."""
        process = await asyncio.create_subprocess_exec(
            self.binary,
            "verify",
            quote_path,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        finally:
            # Timeout or cancellation: never leave the child running
            if process.returncode is None:
                process.kill()
                await process.wait()

        return (
            process.returncode,
            stdout.decode(errors="replace").strip(),
            stderr.decode(errors="replace").strip(),
        )
