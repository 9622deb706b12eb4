from kv_api.main import serve

serve()
