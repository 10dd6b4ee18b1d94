from transcription_api.main import run

run()
