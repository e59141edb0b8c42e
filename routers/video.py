"""Video routes. Routes: /video/connect, disconnect, status, mjpeg, snapshot.jpg."""
import asyncio

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse

from app_state import AppState
from deps import get_state, get_video
from spinecheck.video_backend import VideoBackend

router = APIRouter(tags=["video"])

_NO_STORE = {
	"Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
	"Pragma": "no-cache",
}


@router.post("/video/connect")
async def video_connect(state: AppState = Depends(get_state)):
	"""Open the configured frame source and start the posture overlay stream."""
	try:
		state.video.start()
	except RuntimeError as e:
		raise HTTPException(status_code=503, detail=str(e))
	await asyncio.sleep(0.2)
	st = state.video.get_status()
	if not st.get("running") and st.get("error"):
		err = str(st.get("error"))
		# Camera/model unavailable -> 503 so the UI can show a clear message
		if "camera" in err.lower() or "mediapipe" in err.lower() or "not found" in err.lower():
			raise HTTPException(status_code=503, detail=err)
		raise HTTPException(status_code=500, detail=err)
	if state.log_to_clients:
		state.log_to_clients(f"[Video] {state.video.name()} stream started")
	return {"detail": "Video streaming started.", "status": st}


@router.post("/video/disconnect")
async def video_disconnect(state: AppState = Depends(get_state)):
	"""Stop the active overlay stream and release the frame source."""
	state.video.stop()
	if state.log_to_clients:
		state.log_to_clients(f"[Video] {state.video.name()} stream stopped")
	return {"detail": "Video streaming stopped.", "status": state.video.get_status()}


@router.get("/video/status")
async def video_status(video: VideoBackend = Depends(get_video)):
	return video.get_status()


@router.get("/video/mjpeg")
async def video_mjpeg(fps: float = 15.0, video: VideoBackend = Depends(get_video)):
	"""Live MJPEG stream of the rendered posture overlay."""
	return StreamingResponse(
		video.mjpeg_stream(fps=float(fps)),
		media_type="multipart/x-mixed-replace; boundary=frame",
		headers={**_NO_STORE, "Connection": "keep-alive"},
	)


@router.get("/video/snapshot.jpg")
async def video_snapshot(video: VideoBackend = Depends(get_video)):
	"""Return the latest rendered overlay as a single JPEG."""
	jpeg = await video.snapshot_jpeg()
	if jpeg is None:
		raise HTTPException(status_code=404, detail="No JPEG frame available yet")
	return Response(content=jpeg, media_type="image/jpeg", headers=_NO_STORE)
