from browser_assert.server import cli

if __name__ == '__main__':
	cli()
