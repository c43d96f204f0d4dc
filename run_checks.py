from fastapi.testclient import TestClient
from civic_tickets.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nDEPENDENCIES HEALTH:')
try:
    resp = client.get('/health/dependencies')
    print(resp.status_code)
    print(resp.json())
except Exception as e:
    print('Dependency check raised exception:', e)

print('\nLOGIN (SUPERVISOR):')
resp = client.post('/login', json={'role': 'SUPERVISOR', 'employeeId': 'smoke'})
print(resp.status_code, resp.json())

print('\nTICKETS:')
token = resp.json().get('token')
try:
    resp = client.get('/tickets', headers={'Authorization': f'Bearer {token}'})
    print(resp.status_code, resp.json())
except Exception as e:
    print('Ticket listing raised exception:', e)
