from libb import Setting

Setting.unlock()

postgresql = Setting()
postgresql.url = 'postgresql+psycopg://localhost:5432/test_db'
postgresql.user = 'postgres'
postgresql.password = 'postgres'
postgresql.query = 'select name, value from test_table order by name'
postgresql.fetch_rows = 2

sqlite = Setting()
sqlite.url = 'sqlite:///database.db'
sqlite.query = 'select id, name, value from test_table order by id'
sqlite.fetch_rows = 500

Setting.lock()
