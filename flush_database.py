import asyncio

from create_database import create_tables


if __name__ == "__main__":
    answer = input("This deletes every quiz, submission and account. Type 'flush' to continue: ")
    if answer.strip() != "flush":
        print("Nothing changed.")
    else:
        asyncio.run(create_tables(drop_first=True))
